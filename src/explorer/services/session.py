from __future__ import annotations

import re
from typing import Hashable, Optional, Set, Tuple

from explorer.core.enums import SeedKind
from explorer.core.errors import InvalidInputFormat
from explorer.core.models import Graph
from explorer.services.graph_store import GraphStore
from explorer.services.pagination_tracker import PaginationTracker


_BASE58_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]+$")

TX_ID_LENGTHS = (87, 88)
ACCOUNT_KEY_LENGTHS = (32, 44)


def is_transaction_id(value: str) -> bool:
    lo, hi = TX_ID_LENGTHS
    return lo <= len(value) <= hi and bool(_BASE58_RE.match(value))


def is_account_key(value: str) -> bool:
    lo, hi = ACCOUNT_KEY_LENGTHS
    return lo <= len(value) <= hi and bool(_BASE58_RE.match(value))


def classify_seed(raw: str) -> Tuple[SeedKind, str]:
    value = (raw or "").strip()
    if is_transaction_id(value):
        return SeedKind.TRANSACTION, value
    if is_account_key(value):
        return SeedKind.ACCOUNT, value
    raise InvalidInputFormat(f"Invalid input format: {raw!r}")


class SessionRoot:
    """
    Owns the graph store and the pagination tracker of the current search.

    A new seed replaces both wholesale and bumps ``generation``; anything
    still in flight for an older generation must be dropped when it lands.
    """

    def __init__(self) -> None:
        self.generation = 0
        self.seed: Optional[str] = None
        self.seed_kind: Optional[SeedKind] = None
        self.store = GraphStore()
        self.tracker = PaginationTracker()
        self.in_flight: Set[Hashable] = set()

    def reset(self, seed: str, seed_kind: SeedKind) -> int:
        self.generation += 1
        self.seed = seed
        self.seed_kind = seed_kind
        self.store = GraphStore()
        self.tracker = PaginationTracker()
        self.in_flight = set()
        return self.generation

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    def snapshot(self) -> Graph:
        return Graph(
            seed=self.seed,
            nodes={n.key: n for n in self.store.nodes()},
            edges=self.store.edges(),
            cursors=self.tracker.states(),
        )
