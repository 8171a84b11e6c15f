from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

from explorer.core.models import Graph, amount_to_str


def _dec_to_str(x: Optional[Decimal]) -> Optional[str]:
    # keep as string for JSON precision safety
    return amount_to_str(x) if x is not None else None


def _edge_weight(e) -> float:
    # compress large USD values into a usable line width
    base = e.usd_value if e.usd_value is not None else e.amount
    if base <= 0:
        return 0.0
    return float(base) ** 0.1


def graph_to_dict(g: Graph) -> Dict[str, Any]:
    return {
        "seed": g.seed,
        "nodes": [
            {
                "pubkey": n.key,
                "label": n.display_label,
                "img_url": n.image_url,
                "tags": sorted(n.tags),
                "type": n.kind,
            }
            for n in g.nodes.values()
        ],
        "edges": [
            {
                "key": str(e.key),
                "source": e.source,
                "target": e.target,
                "txId": e.transaction_id,
                "mint": e.asset_id,
                "ticker": e.asset_ticker,
                "amount": _dec_to_str(e.amount),
                "value": _dec_to_str(e.usd_value),
                "label": e.label,
                "type": e.kind,
                "programLabel": e.program_label,
                "tokenImage": e.token_image_url,
                "tags": sorted(e.tags),
                "isExpandable": e.expandable,
                "weight": round(_edge_weight(e), 6),
            }
            for e in g.edges
        ],
        "cursors": {
            key: {
                f"{d.value}_{s.value}": {"hasMore": c.has_more, "page": c.page}
                for d, s, c in st.items()
            }
            for key, st in g.cursors.items()
        },
    }
