import json
import os
import tempfile
import unittest
from decimal import Decimal

from explorer.core.enums import FlowDirection, SeedKind, SortOrder
from explorer.io.output_writer import write_graph_html, write_graph_json, write_summary_md
from explorer.io.schemas import graph_to_dict
from explorer.services.session import SessionRoot

from helpers import ACC_A, ACC_B, ACC_C, SOL, TX1, TX2, edge, node


class OutputWriterTests(unittest.TestCase):
    def setUp(self) -> None:
        session = SessionRoot()
        session.reset(ACC_A, SeedKind.ACCOUNT)
        session.store.commit_nodes([node(ACC_A, label="Seed"), node(ACC_B), node(ACC_C)])
        session.store.commit_edges([
            edge(TX1, ACC_B, ACC_A, amount="10", usd_value=Decimal("10.00")),
            edge(TX2, ACC_A, ACC_C, mint=SOL, amount="0.25", asset_ticker="SOL",
                 usd_value=Decimal("40"), expandable=False),
        ])
        for k in (ACC_A, ACC_B, ACC_C):
            session.tracker.register(k)
        session.tracker.apply(ACC_A, FlowDirection.OUT, SortOrder.ASC, False)
        self.graph = session.snapshot()

    def test_graph_to_dict(self) -> None:
        d = graph_to_dict(self.graph)

        self.assertEqual(d["seed"], ACC_A)
        self.assertEqual(len(d["nodes"]), 3)
        labels = {n["pubkey"]: n["label"] for n in d["nodes"]}
        self.assertEqual(labels[ACC_A], "Seed")
        self.assertEqual(labels[ACC_B], "Bbbb...1111")
        sol = [e for e in d["edges"] if e["txId"] == TX2][0]
        self.assertEqual(sol["amount"], "0.25")
        self.assertEqual(sol["value"], "40")
        self.assertFalse(sol["isExpandable"])
        self.assertAlmostEqual(sol["weight"], 40 ** 0.1, places=5)
        self.assertEqual(d["cursors"][ACC_A]["out_desc"], {"hasMore": False, "page": 1})
        self.assertEqual(d["cursors"][ACC_B]["in_asc"], {"hasMore": True, "page": 1})
        json.dumps(d)

    def test_writers(self) -> None:
        with tempfile.TemporaryDirectory() as d:
            gp = write_graph_json(self.graph, d)
            sp = write_summary_md(self.graph, d)
            hp = write_graph_html(self.graph, d)

            with open(gp, encoding="utf-8") as f:
                self.assertEqual(len(json.load(f)["edges"]), 2)
            with open(sp, encoding="utf-8") as f:
                summary = f.read()
            self.assertTrue(os.path.exists(hp))

        self.assertIn("- Nodes: **3**", summary)
        self.assertIn("- Expandable edges left: **1**", summary)
        self.assertIn("**10.00 USD** | Bbbb...1111", summary)
        self.assertIn("**40.00 USD** | Cccc...1111", summary)
        self.assertIn("Seed: out/asc: done, out/desc: done", summary)


if __name__ == "__main__":
    unittest.main()
