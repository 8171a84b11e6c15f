from __future__ import annotations

from typing import Any, Callable, Dict, List

from explorer.core.models import Edge, Node
from explorer.ports.render_port import RenderPort


ProgressFn = Callable[[str, Dict[str, Any]], None]


class ProgressRenderer(RenderPort):
    """
    Forwards graph changes to a ``progress(event, data)`` callback and keeps
    a running tally, for headless runs.
    """

    def __init__(self, progress: ProgressFn) -> None:
        self._progress = progress
        self.nodes_added = 0
        self.edges_added = 0
        self.failures: List[str] = []

    def on_elements_added(self, new_nodes: List[Node], new_edges: List[Edge], placement_hint) -> None:
        self.nodes_added += len(new_nodes)
        self.edges_added += len(new_edges)
        self._progress("added", {
            "nodes": len(new_nodes),
            "edges": len(new_edges),
            "mode": placement_hint.mode.value,
            "anchors": list(placement_hint.anchors),
        })

    def on_cursor_state_changed(self, node_key, direction, sort, state) -> None:
        self._progress("cursor", {
            "address": node_key,
            "direction": direction.value,
            "sort": sort.value,
            "has_more": state.has_more,
            "page": state.page,
        })

    def on_session_reset(self) -> None:
        self.nodes_added = 0
        self.edges_added = 0
        self.failures = []
        self._progress("reset", {})

    def on_fetch_failed(self, message: str) -> None:
        self.failures.append(message)
        self._progress("error", {"message": message})
