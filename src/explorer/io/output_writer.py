from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path

from explorer.core.models import Graph
from explorer.io.schemas import graph_to_dict


def write_graph_json(graph: Graph, out_dir: str, filename: str = "graph.json") -> str:
    p = Path(out_dir)
    p.mkdir(parents=True, exist_ok=True)

    out_path = p / filename
    with out_path.open("w", encoding="utf-8") as f:
        json.dump(graph_to_dict(graph), f, indent=2)

    return str(out_path)


def write_summary_md(graph: Graph, out_dir: str, filename: str = "summary.md") -> str:
    """
    Short human-readable digest of an exploration session.
    """
    p = Path(out_dir)
    p.mkdir(parents=True, exist_ok=True)

    out_path = p / filename

    seed = graph.seed or ""

    def sort_key(e):
        return (e.usd_value is not None, e.usd_value or 0)

    top = sorted(graph.edges, key=sort_key, reverse=True)[:15]

    def sum_by_address(edges, key):
        totals = {}
        for e in edges:
            if e.usd_value is None:
                continue
            addr = key(e)
            totals[addr] = totals.get(addr, Decimal("0")) + e.usd_value
        return totals

    inflow_totals = sum_by_address(
        [e for e in graph.edges if seed and e.target == seed], lambda e: e.source
    )
    outflow_totals = sum_by_address(
        [e for e in graph.edges if seed and e.source == seed], lambda e: e.target
    )

    def top_n(totals, n=10):
        return sorted(totals.items(), key=lambda x: x[1], reverse=True)[:n]

    def fmt_usd(x: Decimal) -> str:
        return f"{x:.2f}"

    def name(addr: str) -> str:
        n = graph.nodes.get(addr)
        return n.display_label if n else addr

    lines = []
    lines.append("# Exploration Summary\n")
    lines.append(f"- Nodes: **{len(graph.nodes)}**\n")
    lines.append(f"- Edges: **{len(graph.edges)}**\n")
    if seed:
        lines.append(f"- Seed: **{seed}**\n")
    expandable = sum(1 for e in graph.edges if e.expandable)
    lines.append(f"- Expandable edges left: **{expandable}**\n")
    lines.append("\n")

    for title, totals in (
        ("Top 10 Inflow Sources (by USD)", inflow_totals),
        ("Top 10 Outflow Destinations (by USD)", outflow_totals),
    ):
        lines.append(f"## {title}\n\n")
        rows = top_n(totals)
        if not rows:
            lines.append("_No priced transfers touch the seed._\n\n")
            continue
        for addr, usd in rows:
            lines.append(f"- **{fmt_usd(usd)} USD** | {name(addr)} | {addr}\n")
        lines.append("\n")

    lines.append("## Pagination\n\n")
    if not graph.cursors:
        lines.append("_No accounts explored._\n\n")
    else:
        for key, st in sorted(graph.cursors.items()):
            touched = [
                f"{d.value}/{s.value}: " + (f"page {c.page}" if c.has_more else "done")
                for d, s, c in st.items()
                if c.page > 1 or not c.has_more
            ]
            if touched:
                lines.append(f"- {name(key)}: {', '.join(touched)}\n")
        lines.append("\n")

    lines.append("## Top Transfers (by USD value)\n\n")
    if not top:
        lines.append("_No transfers loaded._\n")
    else:
        for e in top:
            usd = fmt_usd(e.usd_value) if e.usd_value is not None else "unknown"
            lines.append(
                f"- **{usd} USD** | {e.amount} {e.asset_ticker or e.asset_id} "
                f"| {name(e.source)} -> {name(e.target)} "
                f"| tx: {e.transaction_id}\n"
            )

    with out_path.open("w", encoding="utf-8") as f:
        f.writelines(lines)

    return str(out_path)


def write_graph_html(graph: Graph, out_dir: str, filename: str = "index.html") -> str:
    p = Path(out_dir)
    p.mkdir(parents=True, exist_ok=True)

    out_path = p / filename

    html = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>Flow Explorer</title>
  <style>
    :root {
      --bg: #0f1115;
      --panel: #151824;
      --text: #e6e8ef;
      --muted: #9aa3b2;
      --edge-sol: #ffff00;
      --edge-token: #00ffff;
      --edge-fee: #ff69b4;
    }
    body {
      margin: 0;
      font-family: "SF Mono", "Menlo", "Consolas", monospace;
      background: #0f1115;
      color: var(--text);
    }
    header {
      padding: 16px 20px;
      border-bottom: 1px solid #23283a;
      background: var(--panel);
    }
    header h1 { margin: 0; font-size: 18px; }
    header p { margin: 6px 0 0 0; font-size: 12px; color: var(--muted); }
    #wrap {
      display: grid;
      grid-template-columns: 260px 1fr;
      height: calc(100vh - 64px);
    }
    #sidebar {
      padding: 14px;
      border-right: 1px solid #23283a;
      background: var(--panel);
    }
    #sidebar h2 {
      font-size: 13px;
      margin: 10px 0 6px 0;
      color: var(--muted);
      text-transform: uppercase;
    }
    #sidebar .stat { font-size: 13px; margin-bottom: 8px; }
    #network { width: 100%; height: 100%; min-height: 600px; background: #0b0d12; }
    .legend { font-size: 12px; color: var(--muted); }
    .legend span {
      display: inline-block;
      width: 10px;
      height: 10px;
      margin-right: 6px;
      border-radius: 2px;
    }
  </style>
</head>
<body>
  <header>
    <h1>Flow Explorer</h1>
    <p>Snapshot of graph.json</p>
  </header>
  <div id="wrap">
    <div id="sidebar">
      <div class="stat" id="stats">Loading...</div>
      <h2>Legend</h2>
      <div class="legend"><span style="background: var(--edge-sol);"></span>SOL transfer</div>
      <div class="legend"><span style="background: var(--edge-token);"></span>Token transfer</div>
      <div class="legend"><span style="background: var(--edge-fee);"></span>Fee</div>
      <div class="legend">Dashed: transaction not expanded yet</div>
    </div>
    <div id="network"></div>
  </div>

  <script src="https://unpkg.com/vis-network/standalone/umd/vis-network.min.js"></script>
  <script>
    const edgeColor = (e) => {
      if (e.type === "fee") return "#ff69b4";
      return e.ticker === "SOL" ? "#ffff00" : "#00ffff";
    };

    fetch("./graph.json")
      .then((r) => r.json())
      .then((data) => {
        if (!window.vis || !window.vis.Network) {
          document.getElementById("stats").textContent = "Graph library failed to load.";
          return;
        }
        const nodes = data.nodes.map((n) => ({
          id: n.pubkey,
          label: n.label,
          title: n.pubkey + (n.tags.length ? " [" + n.tags.join(", ") + "]" : ""),
          shape: n.img_url ? "circularImage" : "dot",
          image: n.img_url || undefined,
          color: n.pubkey === data.seed ? "#f0ad4e" : "#666666",
          size: 16,
          font: { color: "#e6e8ef" },
        }));

        const edges = data.edges.map((e) => ({
          from: e.source,
          to: e.target,
          arrows: "to",
          width: Math.max(1, e.weight),
          dashes: e.isExpandable,
          color: edgeColor(e),
          title: `${e.amount} ${e.ticker || e.mint}` + (e.label ? `\n${e.label}` : "") + `\ntx: ${e.txId}`,
        }));

        const container = document.getElementById("network");
        const options = {
          layout: { improvedLayout: true },
          physics: { stabilization: { iterations: 200 } },
          interaction: { hover: true },
          edges: { smooth: { type: "curvedCW", roundness: 0.1 } },
        };
        const network = new vis.Network(container, { nodes, edges }, options);
        network.once("stabilizationIterationsDone", () => {
          network.fit({ animation: true });
        });

        document.getElementById("stats").textContent =
          `Nodes: ${nodes.length} • Edges: ${edges.length}`;
      })
      .catch((err) => {
        document.getElementById("stats").textContent = "Failed to load graph.json";
        console.error(err);
      });
  </script>
</body>
</html>
"""

    with out_path.open("w", encoding="utf-8") as f:
        f.write(html)

    return str(out_path)
