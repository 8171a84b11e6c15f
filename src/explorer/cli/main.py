from __future__ import annotations

import argparse
import asyncio
import datetime as dt
import logging
import sys
import time
from typing import List, Optional, Tuple

from explorer.adapters.render.progress_renderer import ProgressRenderer
from explorer.adapters.service.http_data_service_adapter import HttpDataServiceAdapter
from explorer.adapters.service.static_data_service_adapter import StaticDataServiceAdapter
from explorer.config import settings
from explorer.core.enums import ExpansionStatus, FlowDirection, SortOrder
from explorer.core.errors import InvalidInputFormat
from explorer.core.models import Edge, short_key
from explorer.io.output_writer import write_graph_html, write_graph_json, write_summary_md
from explorer.services.expansion_controller import ExpansionController
from explorer.services.session import SessionRoot


NodeStep = Tuple[str, FlowDirection, SortOrder]


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="flow-explorer", description="Incremental transaction/account flow explorer")
    p.add_argument("--seed", required=True, help="Transaction signature or account address to start from")
    p.add_argument("--expand-node", action="append", default=[], metavar="KEY:DIR:SORT",
                   help="Expand an account, e.g. <address>:out:desc (repeatable)")
    p.add_argument("--expand-edge", action="append", default=[], metavar="TX|EDGE_KEY",
                   help="Expand an edge by full edge key, or the first expandable edge of a transaction (repeatable)")
    p.add_argument("--pages", type=int, default=1, help="Pages to fetch per --expand-node")
    p.add_argument("--page-size", type=int, default=settings.ACCOUNT_FLOWS_PAGE_SIZE, help="Account flows page size")
    p.add_argument("--out", default="out", help="Output folder")
    p.add_argument("--html", action="store_true", help="Write a basic HTML visualization alongside graph.json")
    p.add_argument("--use-static", metavar="FILE", help="Serve data from a JSON fixture instead of the data service")
    p.add_argument("--log-level", default=settings.LOG_LEVEL, help="Python logging level")
    return p


def parse_node_step(raw: str) -> NodeStep:
    # account keys are base58, so ':' never appears inside them
    parts = raw.rsplit(":", 2)
    if len(parts) != 3:
        raise argparse.ArgumentTypeError(f"expected KEY:DIR:SORT, got {raw!r}")
    key, direction, sort = parts
    try:
        return key, FlowDirection(direction.lower()), SortOrder(sort.lower())
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"bad direction/sort in {raw!r}") from exc


def find_edge(edges: List[Edge], ref: str) -> Optional[Edge]:
    for e in edges:
        if str(e.key) == ref:
            return e
    for e in edges:
        if e.transaction_id == ref and e.expandable:
            return e
    return None


def _make_progress_reporter():
    start_time = time.time()

    def _ts() -> str:
        return dt.datetime.now().strftime("%H:%M:%S")

    def progress(event: str, data: dict) -> None:
        if event == "start":
            print(f"[{_ts()}] Exploring {data['seed']}")
            return
        if event == "reset":
            return
        if event == "added":
            anchors = ", ".join(short_key(a) for a in data.get("anchors", []))
            where = f" near {anchors}" if anchors else ""
            print(f"[{_ts()}] +{data['nodes']} node(s) • +{data['edges']} edge(s){where}")
            return
        if event == "cursor":
            state = f"page {data['page']}" if data["has_more"] else "exhausted"
            print(
                f"[{_ts()}] {short_key(data['address'])} "
                f"{data['direction']}/{data['sort']} -> {state}"
            )
            return
        if event == "skip":
            print(f"[{_ts()}] Skipped: {data.get('reason')}")
            return
        if event == "done":
            elapsed = time.time() - start_time
            print(
                f"[{_ts()}] Done in {elapsed:.1f}s • "
                f"{data['nodes']} nodes • {data['edges']} edges"
            )
            return
        if event == "error":
            print(f"[{_ts()}] Error: {data.get('message', 'Unknown error')}", file=sys.stderr)

    return progress


async def _explore(args, steps: List[NodeStep], controller: ExpansionController, progress) -> int:
    progress("start", {"seed": args.seed})
    result = await controller.start_session(args.seed)
    if result.status is ExpansionStatus.FAILED:
        return 1

    for key, direction, sort in steps:
        for _ in range(max(1, args.pages)):
            r = await controller.expand_node(key, direction, sort)
            if r.status is ExpansionStatus.REJECTED:
                progress("skip", {"reason": r.reason})
                break
            if r.status is ExpansionStatus.FAILED:
                return 1
            if not controller.session.tracker.can_fetch(key, direction, sort):
                break

    for ref in args.expand_edge:
        edge = find_edge(controller.session.store.edges(), ref)
        if edge is None:
            progress("skip", {"reason": f"no expandable edge matches {ref}"})
            continue
        r = await controller.expand_edge(edge.key)
        if r.status is ExpansionStatus.REJECTED:
            progress("skip", {"reason": r.reason})
        elif r.status is ExpansionStatus.FAILED:
            return 1

    store = controller.session.store
    progress("done", {"nodes": store.node_count, "edges": store.edge_count})
    return 0


def main() -> int:
    args = build_arg_parser().parse_args()
    logging.basicConfig(
        level=str(args.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        steps = [parse_node_step(s) for s in args.expand_node]
    except argparse.ArgumentTypeError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    progress = _make_progress_reporter()

    # Ports
    if args.use_static:
        service = StaticDataServiceAdapter.from_json(args.use_static)
        adapter_label = f"StaticDataServiceAdapter ({args.use_static})"
    else:
        service = HttpDataServiceAdapter()
        adapter_label = f"HttpDataServiceAdapter ({settings.DATA_SERVICE_BASE_URL})"

    session = SessionRoot()
    controller = ExpansionController(
        session=session,
        service=service,
        renderer=ProgressRenderer(progress),
        page_size=args.page_size,
    )
    print(f"Adapter: {adapter_label}")

    try:
        code = asyncio.run(_explore(args, steps, controller, progress))
    except InvalidInputFormat as exc:
        progress("error", {"message": str(exc)})
        return 2

    # Outputs
    graph = session.snapshot()
    print("Writing outputs...")
    graph_path = write_graph_json(graph, args.out)
    summary_path = write_summary_md(graph, args.out)
    print(f"Wrote: {graph_path}")
    print(f"Wrote: {summary_path}")
    if args.html:
        print(f"Wrote: {write_graph_html(graph, args.out)}")
    return code


if __name__ == "__main__":
    raise SystemExit(main())
