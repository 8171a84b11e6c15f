from __future__ import annotations

from enum import Enum


class FlowDirection(str, Enum):
    IN = "in"
    OUT = "out"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @property
    def opposite(self) -> "SortOrder":
        return SortOrder.DESC if self is SortOrder.ASC else SortOrder.ASC


class SeedKind(str, Enum):
    TRANSACTION = "transaction"
    ACCOUNT = "account"


class ExpansionStatus(str, Enum):
    APPLIED = "applied"
    REJECTED = "rejected"
    STALE = "stale"
    FAILED = "failed"


class PlacementMode(str, Enum):
    SEED = "seed"
    NODE = "node"
    MIDPOINT = "midpoint"
