from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Set

from explorer.core.models import Edge, Node
from explorer.services.graph_store import GraphStore, check_edge_key


@dataclass
class MergeResult:
    new_nodes: List[Node] = field(default_factory=list)
    new_edges: List[Edge] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.new_nodes and not self.new_edges


def merge_batch(store: GraphStore, nodes: Iterable[Node], edges: Iterable[Edge]) -> MergeResult:
    """
    Commit the net-new part of a fetched batch and return it.

    Nodes go in first. Any edge endpoint that is neither stored nor in the
    batch gets a bare placeholder node so edges never point at nothing.
    Duplicates inside the batch count once; the store does the membership
    check, so a repeated key is simply skipped on its second occurrence.
    """
    nodes = list(nodes)
    edges = list(edges)
    # validate the whole batch before the first commit
    for n in nodes:
        if not n.key:
            raise ValueError("node key must be a non-empty string")
    for e in edges:
        check_edge_key(e)

    new_nodes = store.commit_nodes(nodes)

    missing: List[Node] = []
    seen: Set[str] = set()
    for e in edges:
        for k in (e.source, e.target):
            if k and k not in seen and not store.has_node(k):
                seen.add(k)
                missing.append(Node(key=k))
    if missing:
        new_nodes.extend(store.commit_nodes(missing))

    new_edges = store.commit_edges(edges)
    return MergeResult(new_nodes=new_nodes, new_edges=new_edges)
