from __future__ import annotations

import logging
from dataclasses import replace
from typing import Hashable, List, Optional, Union

from explorer.config import settings
from explorer.core.enums import ExpansionStatus, FlowDirection, SeedKind, SortOrder
from explorer.core.errors import PreconditionViolation, TransientFetchFailure
from explorer.core.models import Edge, EdgeKey, ExpansionResult, Node, PlacementHint
from explorer.ports.data_service_port import DataServicePort
from explorer.ports.render_port import NullRenderPort, RenderPort
from explorer.services.diff_merger import MergeResult, merge_batch
from explorer.services.session import SessionRoot, classify_seed

logger = logging.getLogger(__name__)


class ExpansionController:
    """
    Drives fetch -> merge -> notify cycles against one SessionRoot.

    - Seed: a transaction (all its transfers) or an account (a single node)
    - Node expansion: one page of an account's in/out flows, asc or desc
    - Edge expansion: every transfer of the edge's transaction, once

    Runs on a single event loop. Every call suspends only while waiting on
    the data service; all checks and all writes to the store and tracker
    happen between awaits, so they never interleave.
    """

    def __init__(
        self,
        session: SessionRoot,
        service: DataServicePort,
        renderer: Optional[RenderPort] = None,
        page_size: int = settings.ACCOUNT_FLOWS_PAGE_SIZE,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be > 0")
        self.session = session
        self.service = service
        self.renderer = renderer or NullRenderPort()
        self.page_size = page_size

    # -------------------------
    # Seed
    # -------------------------

    async def start_session(self, raw_input: str) -> ExpansionResult:
        # raises InvalidInputFormat before anything is touched
        kind, seed = classify_seed(raw_input)

        self.renderer.on_session_reset()
        generation = self.session.reset(seed, kind)
        logger.info(f"Session {generation} started from {kind.value} {seed}")

        if kind is SeedKind.TRANSACTION:
            return await self._seed_transaction(seed, generation)
        return await self._seed_account(seed, generation)

    async def _seed_transaction(self, tx_id: str, generation: int) -> ExpansionResult:
        try:
            flows = await self.service.fetch_transaction_flows(tx_id, [], [])
        except Exception as exc:
            return self._fetch_failed(generation, f"transaction {tx_id}", exc)

        if not self.session.is_current(generation):
            return self._stale(generation)

        # the seed transaction is expanded by construction
        edges = [replace(e, expandable=False) for e in flows.edges]
        return self._commit(generation, flows.nodes, edges, PlacementHint.seed())

    async def _seed_account(self, account_key: str, generation: int) -> ExpansionResult:
        try:
            meta = await self.service.fetch_account_metadata(account_key)
        except Exception as exc:
            return self._fetch_failed(generation, f"account {account_key}", exc)

        if not self.session.is_current(generation):
            return self._stale(generation)

        node = replace(meta.to_node(), key=account_key)
        return self._commit(generation, [node], [], PlacementHint.seed())

    # -------------------------
    # Node expansion
    # -------------------------

    async def expand_node(
        self,
        node_key: str,
        direction: Union[FlowDirection, str],
        sort: Union[SortOrder, str],
    ) -> ExpansionResult:
        direction = FlowDirection(direction)
        sort = SortOrder(sort)
        session = self.session
        generation = session.generation
        token = ("node", node_key, direction, sort)

        try:
            self._check_node_expandable(node_key, direction, sort, token)
        except PreconditionViolation as exc:
            return self._rejected(exc)

        page = session.tracker.cursor_state(node_key, direction, sort).page
        in_flight = session.in_flight
        in_flight.add(token)
        logger.debug(f"Fetching {direction.value}/{sort.value} page {page} for {node_key}")

        try:
            flows = await self.service.fetch_account_flows(
                node_key,
                direction,
                sort,
                self.page_size,
                session.store.node_keys(),
                session.store.edge_keys(),
                page,
            )
        except Exception as exc:
            return self._fetch_failed(generation, f"account flows {node_key}", exc)
        finally:
            in_flight.discard(token)

        if not self.session.is_current(generation):
            return self._stale(generation)

        result = self._merge(generation, flows.nodes, flows.edges, PlacementHint.at_node(node_key))
        if not result.applied:
            return result
        # store and cursor change together, before any callback runs
        changes = self.session.tracker.apply(node_key, direction, sort, flows.has_more)
        self._notify_added(result)
        for d, s, state in changes:
            self.renderer.on_cursor_state_changed(node_key, d, s, state)
        return result

    def _check_node_expandable(
        self, node_key: str, direction: FlowDirection, sort: SortOrder, token: Hashable
    ) -> None:
        session = self.session
        if not session.store.has_node(node_key):
            raise PreconditionViolation(f"unknown node {node_key}")
        if not session.tracker.can_fetch(node_key, direction, sort):
            raise PreconditionViolation(
                f"cursor {direction.value}/{sort.value} exhausted for {node_key}"
            )
        if token in session.in_flight:
            raise PreconditionViolation(
                f"cursor {direction.value}/{sort.value} already in flight for {node_key}"
            )

    # -------------------------
    # Edge expansion
    # -------------------------

    async def expand_edge(self, edge_key: EdgeKey) -> ExpansionResult:
        session = self.session
        generation = session.generation
        token = ("edge", edge_key)

        try:
            edge = self._check_edge_expandable(edge_key, token)
        except PreconditionViolation as exc:
            return self._rejected(exc)

        tx_id = edge.transaction_id
        in_flight = session.in_flight
        in_flight.add(token)
        logger.debug(f"Fetching transaction {tx_id} for edge {edge_key}")

        try:
            flows = await self.service.fetch_transaction_flows(
                tx_id,
                session.store.node_keys(),
                session.store.edge_keys(),
            )
        except Exception as exc:
            return self._fetch_failed(generation, f"transaction {tx_id}", exc)
        finally:
            in_flight.discard(token)

        if not self.session.is_current(generation):
            return self._stale(generation)

        # transfers of this transaction need no further expansion
        edges = [
            replace(e, expandable=False) if e.transaction_id == tx_id else e
            for e in flows.edges
        ]
        result = self._merge(
            generation, flows.nodes, edges, PlacementHint.between(edge.source, edge.target)
        )
        if result.applied:
            self.session.store.mark_expanded(edge_key)
            self._notify_added(result)
        return result

    def _check_edge_expandable(self, edge_key: EdgeKey, token: Hashable) -> Edge:
        edge = self.session.store.get_edge(edge_key)
        if edge is None:
            raise PreconditionViolation(f"unknown edge {edge_key}")
        if not edge.expandable:
            raise PreconditionViolation(f"edge {edge_key} already expanded")
        if token in self.session.in_flight:
            raise PreconditionViolation(f"edge {edge_key} already in flight")
        return edge

    # -------------------------
    # Helpers
    # -------------------------

    def _commit(
        self,
        generation: int,
        nodes: List[Node],
        edges: List[Edge],
        hint: PlacementHint,
    ) -> ExpansionResult:
        result = self._merge(generation, nodes, edges, hint)
        if result.applied:
            self._notify_added(result)
        return result

    def _merge(
        self,
        generation: int,
        nodes: List[Node],
        edges: List[Edge],
        hint: PlacementHint,
    ) -> ExpansionResult:
        store = self.session.store
        try:
            merged: MergeResult = merge_batch(store, nodes, edges)
        except ValueError as exc:
            return self._fetch_failed(generation, "malformed batch", exc)

        tracker = self.session.tracker
        for n in merged.new_nodes:
            tracker.register(n.key)

        logger.info(
            f"Merged {len(merged.new_nodes)} node(s), {len(merged.new_edges)} edge(s) "
            f"• total {store.node_count} nodes • {store.edge_count} edges"
        )
        return ExpansionResult(
            status=ExpansionStatus.APPLIED,
            new_nodes=merged.new_nodes,
            new_edges=merged.new_edges,
            placement_hint=hint,
        )

    def _notify_added(self, result: ExpansionResult) -> None:
        self.renderer.on_elements_added(result.new_nodes, result.new_edges, result.placement_hint)

    def _fetch_failed(self, generation: int, what: str, exc: Exception) -> ExpansionResult:
        if not self.session.is_current(generation):
            return self._stale(generation)

        failure = TransientFetchFailure(f"{what}: {exc.__class__.__name__}: {exc}")
        logger.warning(f"Fetch failed for {failure}")
        self.renderer.on_fetch_failed(settings.FETCH_FAILED_MESSAGE)
        return ExpansionResult(status=ExpansionStatus.FAILED, reason=str(failure))

    def _stale(self, generation: int) -> ExpansionResult:
        logger.debug(f"Dropping response from generation {generation} (current {self.session.generation})")
        return ExpansionResult(status=ExpansionStatus.STALE, reason="session was reset")

    @staticmethod
    def _rejected(exc: PreconditionViolation) -> ExpansionResult:
        logger.debug(f"Expansion rejected: {exc}")
        return ExpansionResult(status=ExpansionStatus.REJECTED, reason=str(exc))


__all__ = ["ExpansionController"]
