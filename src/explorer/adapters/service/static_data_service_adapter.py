from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Optional

from explorer.adapters.service.payloads import edge_from_row, node_from_row, parse_account_metadata
from explorer.core.dto import AccountFlows, AccountMetadata, TransactionFlows
from explorer.core.enums import FlowDirection, SortOrder
from explorer.core.models import Edge, Node
from explorer.ports.data_service_port import DataServicePort


class StaticDataServiceAdapter(DataServicePort):
    """
    In-memory data service for dev/testing.

    ``edges`` are taken to be in chronological order; ``asc`` pages walk
    them from the front and ``desc`` pages from the back.
    """

    def __init__(self,
                 nodes: Optional[List[Node]] = None,
                 edges: Optional[List[Edge]] = None,
                 accounts: Optional[Dict[str, AccountMetadata]] = None,
                 ):
        self._nodes = {n.key: n for n in (nodes or [])}
        self._edges = list(edges or [])
        self._accounts = dict(accounts or {})

    @classmethod
    def from_json(cls, path: str) -> "StaticDataServiceAdapter":
        with Path(path).open("r", encoding="utf-8") as f:
            data = json.load(f)
        return cls(
            nodes=[node_from_row(r) for r in data.get("nodes", [])],
            edges=[edge_from_row(r) for r in data.get("edges", [])],
            accounts={
                k: parse_account_metadata(k, v) for k, v in (data.get("accounts") or {}).items()
            },
        )

    def _node(self, key: str) -> Node:
        n = self._nodes.get(key)
        return replace(n) if n else Node(key=key)

    def _batch_nodes(self, edges: List[Edge], existing_node_keys) -> List[Node]:
        known = set(existing_node_keys)
        out: List[Node] = []
        for e in edges:
            for k in (e.source, e.target):
                if k not in known:
                    known.add(k)
                    out.append(self._node(k))
        return out

    async def fetch_transaction_flows(self, transaction_id, existing_node_keys, existing_edge_keys):
        known_edges = set(existing_edge_keys)
        items = [
            replace(e) for e in self._edges
            if e.transaction_id == transaction_id and str(e.key) not in known_edges
        ]
        return TransactionFlows(nodes=self._batch_nodes(items, existing_node_keys), edges=items)

    async def fetch_account_flows(
        self, account_key, direction, sort, limit, existing_node_keys, existing_edge_keys, page
    ):
        if FlowDirection(direction) is FlowDirection.IN:
            items = [e for e in self._edges if e.target == account_key]
        else:
            items = [e for e in self._edges if e.source == account_key]
        if SortOrder(sort) is SortOrder.DESC:
            items.reverse()

        start = (int(page) - 1) * int(limit)
        window = items[start:start + int(limit)]
        has_more = start + int(limit) < len(items)

        known_edges = set(existing_edge_keys)
        window = [replace(e) for e in window if str(e.key) not in known_edges]
        return AccountFlows(
            nodes=self._batch_nodes(window, existing_node_keys),
            edges=window,
            has_more=has_more,
        )

    async def fetch_account_metadata(self, account_key):
        meta = self._accounts.get(account_key)
        if meta is not None:
            return meta
        n = self._nodes.get(account_key)
        if n is not None:
            return AccountMetadata(account_key, n.label, n.image_url, n.tags, n.kind)
        return AccountMetadata(account_key=account_key)
