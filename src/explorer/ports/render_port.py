from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from explorer.core.enums import FlowDirection, SortOrder
from explorer.core.models import CursorState, Edge, Node, PlacementHint


class RenderPort(ABC):
    """
    Receives graph changes for display. Implementations only read what they
    are handed; they never mutate the session.
    """

    @abstractmethod
    def on_elements_added(
        self, new_nodes: List[Node], new_edges: List[Edge], placement_hint: PlacementHint
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    def on_cursor_state_changed(
        self, node_key: str, direction: FlowDirection, sort: SortOrder, state: CursorState
    ) -> None:
        raise NotImplementedError

    @abstractmethod
    def on_session_reset(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def on_fetch_failed(self, message: str) -> None:
        raise NotImplementedError


class NullRenderPort(RenderPort):

    def on_elements_added(self, new_nodes, new_edges, placement_hint) -> None:
        pass

    def on_cursor_state_changed(self, node_key, direction, sort, state) -> None:
        pass

    def on_session_reset(self) -> None:
        pass

    def on_fetch_failed(self, message: str) -> None:
        pass
