import asyncio
from decimal import Decimal
from typing import Dict, List, Optional

from explorer.core.dto import AccountFlows, AccountMetadata, TransactionFlows
from explorer.core.models import Edge, Node
from explorer.ports.data_service_port import DataServicePort
from explorer.ports.render_port import RenderPort


# base58 ids of the right lengths (tx 88, accounts 44)
TX1 = "5" + "K" * 87
TX2 = "6" + "K" * 87
TX3 = "7" + "K" * 87
ACC_A = "Aaaa" + "1" * 40
ACC_B = "Bbbb" + "1" * 40
ACC_C = "Cccc" + "1" * 40
ACC_D = "Dddd" + "1" * 40

USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
SOL = "So11111111111111111111111111111111111111112"


def node(key: str, label: Optional[str] = None) -> Node:
    return Node(key=key, label=label)


def edge(tx: str, src: str, dst: str, mint: str = USDC, amount: str = "100", **kw) -> Edge:
    return Edge(source=src, target=dst, transaction_id=tx, asset_id=mint, amount=Decimal(amount), **kw)


class RecordingRenderer(RenderPort):
    def __init__(self) -> None:
        self.events: List[tuple] = []

    def on_elements_added(self, new_nodes, new_edges, placement_hint) -> None:
        self.events.append(("added", list(new_nodes), list(new_edges), placement_hint))

    def on_cursor_state_changed(self, node_key, direction, sort, state) -> None:
        self.events.append(("cursor", node_key, direction, sort, state))

    def on_session_reset(self) -> None:
        self.events.append(("reset",))

    def on_fetch_failed(self, message: str) -> None:
        self.events.append(("failed", message))

    def of(self, kind: str) -> List[tuple]:
        return [e for e in self.events if e[0] == kind]


class ScriptedService(DataServicePort):
    """
    Returns canned responses in call order and records every call.

    A queued ``Exception`` is raised instead of returned. With ``gated`` set,
    each call waits on its own event so a test can decide when it lands.
    """

    def __init__(self, gated: bool = False) -> None:
        self.transactions: Dict[str, list] = {}
        self.account_pages: Dict[tuple, list] = {}
        self.metadata: Dict[str, AccountMetadata] = {}
        self.calls: List[tuple] = []
        self.gated = gated
        self.gates: List[asyncio.Event] = []

    def add_transaction(self, tx: str, response) -> None:
        self.transactions.setdefault(tx, []).append(response)

    def add_account_page(self, key: str, direction: str, sort: str, response) -> None:
        self.account_pages.setdefault((key, direction, sort), []).append(response)

    async def _wait(self) -> None:
        if self.gated:
            gate = asyncio.Event()
            self.gates.append(gate)
            await gate.wait()

    @staticmethod
    def _out(response):
        if isinstance(response, Exception):
            raise response
        return response

    async def fetch_transaction_flows(self, transaction_id, existing_node_keys, existing_edge_keys):
        self.calls.append(("tx", transaction_id, list(existing_node_keys), list(existing_edge_keys)))
        await self._wait()
        return self._out(self.transactions[transaction_id].pop(0))

    async def fetch_account_flows(
        self, account_key, direction, sort, limit, existing_node_keys, existing_edge_keys, page
    ):
        self.calls.append(
            ("account", account_key, direction.value, sort.value, limit, page,
             list(existing_node_keys), list(existing_edge_keys))
        )
        await self._wait()
        return self._out(self.account_pages[(account_key, direction.value, sort.value)].pop(0))

    async def fetch_account_metadata(self, account_key):
        self.calls.append(("meta", account_key))
        await self._wait()
        return self._out(self.metadata.get(account_key, AccountMetadata(account_key=account_key)))


def tx_flows(nodes, edges) -> TransactionFlows:
    return TransactionFlows(nodes=list(nodes), edges=list(edges))


def account_flows(nodes, edges, has_more: bool) -> AccountFlows:
    return AccountFlows(nodes=list(nodes), edges=list(edges), has_more=has_more)
