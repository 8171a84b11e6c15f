from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from explorer.core.dto import AccountFlows, AccountMetadata, TransactionFlows
from explorer.core.errors import DataSourceError
from explorer.core.models import Edge, Node


def _dec(val: Any) -> Optional[Decimal]:
    if val is None:
        return None
    try:
        d = Decimal(str(val))
    except (InvalidOperation, ValueError):
        return None
    # NaN never equals itself and sNaN cannot be hashed
    return d if d.is_finite() else None


def _required(row: Dict[str, Any], name: str) -> str:
    val = row.get(name)
    if val is None or str(val) == "":
        raise DataSourceError(f"Missing '{name}' in service row: {row}")
    return str(val)


def _tags(raw: Any) -> frozenset:
    if not isinstance(raw, list):
        return frozenset()
    return frozenset(str(t) for t in raw if t)


def _rows(data: Dict[str, Any], *names: str) -> List[Dict[str, Any]]:
    for name in names:
        rows = data.get(name)
        if isinstance(rows, list):
            return [r for r in rows if isinstance(r, dict)]
    return []


def node_from_row(row: Dict[str, Any]) -> Node:
    return Node(
        key=_required(row, "pubkey"),
        label=row.get("label") or row.get("tag") or None,
        image_url=row.get("img_url") or None,
        tags=_tags(row.get("tags")),
        kind=row.get("type") or None,
    )


def edge_from_row(row: Dict[str, Any]) -> Edge:
    amount = _dec(row.get("amount"))
    if amount is None:
        raise DataSourceError(f"Invalid 'amount' in service row: {row}")

    return Edge(
        source=_required(row, "source"),
        target=_required(row, "target"),
        transaction_id=_required(row, "txId"),
        asset_id=_required(row, "mint"),
        amount=amount,
        asset_ticker=row.get("ticker") or None,
        label=row.get("label") or row.get("tag") or None,
        usd_value=_dec(row.get("value")),
        kind=row.get("type") or None,
        program_label=row.get("programLabel") or None,
        token_image_url=row.get("tokenImage") or None,
        tags=_tags(row.get("tags")),
        expandable=bool(row.get("isExpandable", True)),
    )


def _check_dict(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise DataSourceError(f"Invalid service response: {data}")
    if data.get("error"):
        raise DataSourceError(f"Service error: {data['error']}")
    return data


def parse_transaction_flows(data: Any) -> TransactionFlows:
    data = _check_dict(data)
    return TransactionFlows(
        nodes=[node_from_row(r) for r in _rows(data, "nodes")],
        # older service builds call them "links"
        edges=[edge_from_row(r) for r in _rows(data, "edges", "links")],
    )


def parse_account_flows(data: Any) -> AccountFlows:
    data = _check_dict(data)
    return AccountFlows(
        nodes=[node_from_row(r) for r in _rows(data, "nodes")],
        edges=[edge_from_row(r) for r in _rows(data, "edges", "links")],
        has_more=bool(data.get("hasMore", False)),
    )


def parse_account_metadata(account_key: str, data: Any) -> AccountMetadata:
    data = _check_dict(data)
    return AccountMetadata(
        account_key=str(data.get("pubkey") or account_key),
        label=data.get("label") or data.get("tag") or None,
        image_url=data.get("img_url") or None,
        tags=_tags(data.get("tags")),
        kind=data.get("type") or None,
    )
