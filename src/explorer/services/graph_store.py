from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Set

from explorer.core.models import Edge, EdgeKey, Node


class GraphStore:
    """
    Deduplicated nodes and edges materialized for one session.

    Two keyed mappings plus an incident-edge index; no object back-pointers.
    Sets only grow. Commits are idempotent.
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, Node] = {}
        self._edges: Dict[EdgeKey, Edge] = {}
        self._incident: Dict[str, Set[EdgeKey]] = {}

    # -------------------------
    # Queries
    # -------------------------

    def has_node(self, key: str) -> bool:
        return key in self._nodes

    def has_edge(self, key: EdgeKey) -> bool:
        return key in self._edges

    def get_node(self, key: str) -> Optional[Node]:
        return self._nodes.get(key)

    def get_edge(self, key: EdgeKey) -> Optional[Edge]:
        return self._edges.get(key)

    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    def edges(self) -> List[Edge]:
        return list(self._edges.values())

    def node_keys(self) -> List[str]:
        return list(self._nodes)

    def edge_keys(self) -> List[str]:
        # wire form, as sent to the data service
        return [str(k) for k in self._edges]

    def incident_edges(self, node_key: str) -> List[Edge]:
        return [self._edges[k] for k in self._incident.get(node_key, ())]

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    # -------------------------
    # Commits
    # -------------------------

    def commit_nodes(self, nodes: Iterable[Node]) -> List[Node]:
        added: List[Node] = []
        for n in nodes:
            if not n.key:
                raise ValueError("node key must be a non-empty string")
            if n.key in self._nodes:
                continue
            self._nodes[n.key] = n
            added.append(n)
        return added

    def commit_edges(self, edges: Iterable[Edge]) -> List[Edge]:
        added: List[Edge] = []
        for e in edges:
            check_edge_key(e)
            k = e.key
            if k in self._edges:
                continue
            self._edges[k] = e
            self._incident.setdefault(e.source, set()).add(k)
            self._incident.setdefault(e.target, set()).add(k)
            added.append(e)
        return added

    def mark_expanded(self, key: EdgeKey) -> None:
        edge = self._edges.get(key)
        if edge is None:
            raise KeyError(str(key))
        edge.expandable = False


def check_edge_key(e: Edge) -> None:
    for part in (e.transaction_id, e.source, e.target, e.asset_id):
        if not part:
            raise ValueError(f"edge key parts must be non-empty strings: {e.key}")
    # NaN breaks key equality and sNaN cannot be hashed
    if not isinstance(e.amount, Decimal) or not e.amount.is_finite():
        raise ValueError(f"edge amount must be a finite Decimal: tx {e.transaction_id} amount {e.amount!r}")
