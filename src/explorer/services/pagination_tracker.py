from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from explorer.core.enums import FlowDirection, SortOrder
from explorer.core.models import Cursor, CursorState, PaginationState


CursorChange = Tuple[FlowDirection, SortOrder, CursorState]


class PaginationTracker:
    """
    Per-node cursor state machine.

    Each node owns four cursors, one per (direction, sort). A cursor starts at
    page 1, moves forward one page per successful fetch that reports more
    data, and stops for good the first time a fetch reports none. Both sort
    orders of a direction walk the same ordered listing from opposite ends,
    so when one of them runs out the other is closed too.
    """

    def __init__(self) -> None:
        self._states: Dict[str, PaginationState] = {}

    def register(self, node_key: str) -> bool:
        if not node_key:
            raise ValueError("node key must be a non-empty string")
        if node_key in self._states:
            return False
        self._states[node_key] = PaginationState()
        return True

    def has_state(self, node_key: str) -> bool:
        return node_key in self._states

    def state(self, node_key: str) -> Optional[PaginationState]:
        return self._states.get(node_key)

    def states(self) -> Dict[str, PaginationState]:
        return dict(self._states)

    def cursor_state(
        self, node_key: str, direction: FlowDirection, sort: SortOrder
    ) -> Optional[CursorState]:
        st = self._states.get(node_key)
        if st is None:
            return None
        return st.cursor(direction, sort).snapshot()

    def can_fetch(self, node_key: str, direction: FlowDirection, sort: SortOrder) -> bool:
        st = self._states.get(node_key)
        return st is not None and not st.cursor(direction, sort).exhausted

    def is_fully_exhausted(self, node_key: str) -> bool:
        st = self._states.get(node_key)
        if st is None:
            return False
        return all(c.exhausted for _, _, c in st.items())

    def apply(
        self, node_key: str, direction: FlowDirection, sort: SortOrder, has_more: bool
    ) -> List[CursorChange]:
        """
        Record a successful fetch for one cursor and return every cursor that
        changed as a result (the sibling included).
        """
        st = self._states.get(node_key)
        if st is None:
            raise KeyError(node_key)

        changes: List[CursorChange] = []
        cur = st.cursor(direction, sort)

        if has_more:
            if cur.advance():
                changes.append((direction, sort, cur.snapshot()))
            return changes

        if cur.exhaust():
            changes.append((direction, sort, cur.snapshot()))

        sibling: Cursor = st.cursor(direction, sort.opposite)
        if sibling.exhaust():
            changes.append((direction, sort.opposite, sibling.snapshot()))

        return changes
