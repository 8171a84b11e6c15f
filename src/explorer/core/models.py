from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, FrozenSet, List, Optional, Tuple

from explorer.core.enums import ExpansionStatus, FlowDirection, PlacementMode, SortOrder


def short_key(key: str) -> str:
    if len(key) <= 8:
        return key
    return f"{key[:4]}...{key[-4:]}"


def amount_to_str(x: Decimal) -> str:
    # plain notation, no exponent, no trailing zeros
    s = format(x, "f")
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s or "0"



# Graph models

@dataclass(frozen=True)
class EdgeKey:
    """
    Identity of a transfer edge.

    A single transaction can move the same amount of the same asset between
    the same two accounts through distinct instructions, so all five parts
    are needed to tell two edges apart.
    """

    transaction_id: str
    source: str
    target: str
    asset_id: str
    amount: Decimal

    def __str__(self) -> str:
        return "-".join(
            (self.transaction_id, self.source, self.target, self.asset_id, amount_to_str(self.amount))
        )


@dataclass
class Node:

    key: str
    label: Optional[str] = None
    image_url: Optional[str] = None
    tags: FrozenSet[str] = frozenset()
    kind: Optional[str] = None

    @property
    def display_label(self) -> str:
        return self.label or short_key(self.key)


@dataclass
class Edge:

    source: str
    target: str

    transaction_id: str
    asset_id: str               # token mint
    amount: Decimal

    asset_ticker: Optional[str] = None
    label: Optional[str] = None
    usd_value: Optional[Decimal] = None

    kind: Optional[str] = None          # "transfer", "fee", ...
    program_label: Optional[str] = None
    token_image_url: Optional[str] = None
    tags: FrozenSet[str] = frozenset()

    expandable: bool = True

    @property
    def key(self) -> EdgeKey:
        return EdgeKey(
            transaction_id=self.transaction_id,
            source=self.source,
            target=self.target,
            asset_id=self.asset_id,
            amount=self.amount,
        )



# Pagination models

@dataclass(frozen=True)
class CursorState:
    has_more: bool
    page: int


@dataclass
class Cursor:
    """
    Progress through one (direction, sort) listing of a node's flows.

    ``page`` is the next page to request. Once ``has_more`` is False the
    cursor is terminal.
    """

    has_more: bool = True
    page: int = 1

    @property
    def exhausted(self) -> bool:
        return not self.has_more

    def advance(self) -> bool:
        if self.exhausted:
            return False
        self.page += 1
        return True

    def exhaust(self) -> bool:
        if self.exhausted:
            return False
        self.has_more = False
        return True

    def snapshot(self) -> CursorState:
        return CursorState(has_more=self.has_more, page=self.page)


@dataclass
class PaginationState:

    in_asc: Cursor = field(default_factory=Cursor)
    in_desc: Cursor = field(default_factory=Cursor)
    out_asc: Cursor = field(default_factory=Cursor)
    out_desc: Cursor = field(default_factory=Cursor)

    def cursor(self, direction: FlowDirection, sort: SortOrder) -> Cursor:
        if direction is FlowDirection.IN:
            return self.in_asc if sort is SortOrder.ASC else self.in_desc
        return self.out_asc if sort is SortOrder.ASC else self.out_desc

    def items(self) -> List[Tuple[FlowDirection, SortOrder, Cursor]]:
        return [
            (FlowDirection.IN, SortOrder.ASC, self.in_asc),
            (FlowDirection.IN, SortOrder.DESC, self.in_desc),
            (FlowDirection.OUT, SortOrder.ASC, self.out_asc),
            (FlowDirection.OUT, SortOrder.DESC, self.out_desc),
        ]



# Expansion models

@dataclass(frozen=True)
class PlacementHint:
    """
    Where the renderer should place freshly added elements.

    Positions are owned by the renderer, so the hint only names the anchor
    node(s): one node for a node expansion, both endpoints for an edge
    expansion (place around their midpoint), none for a seed.
    """

    mode: PlacementMode
    anchors: Tuple[str, ...] = ()

    @classmethod
    def seed(cls) -> "PlacementHint":
        return cls(PlacementMode.SEED)

    @classmethod
    def at_node(cls, node_key: str) -> "PlacementHint":
        return cls(PlacementMode.NODE, (node_key,))

    @classmethod
    def between(cls, source: str, target: str) -> "PlacementHint":
        return cls(PlacementMode.MIDPOINT, (source, target))


@dataclass
class ExpansionResult:

    status: ExpansionStatus
    new_nodes: List[Node] = field(default_factory=list)
    new_edges: List[Edge] = field(default_factory=list)
    placement_hint: Optional[PlacementHint] = None
    reason: Optional[str] = None

    @property
    def applied(self) -> bool:
        return self.status is ExpansionStatus.APPLIED


@dataclass
class Graph:
    """Read-only snapshot of a session, used for export."""

    seed: Optional[str] = None
    nodes: Dict[str, Node] = field(default_factory=dict)
    edges: List[Edge] = field(default_factory=list)
    cursors: Dict[str, PaginationState] = field(default_factory=dict)
