from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from explorer.core.dto import AccountFlows, AccountMetadata, TransactionFlows
from explorer.core.enums import FlowDirection, SortOrder


class DataServicePort(ABC):
    """
    Abstract Class for fetching graph pages from the flow indexing service.

    The existing key lists are a hint only: the service may skip entities the
    caller already holds, but callers must not depend on it.
    """

    # --- Every transfer inside one transaction ---

    @abstractmethod
    async def fetch_transaction_flows(
        self,
        transaction_id: str,
        existing_node_keys: Sequence[str],
        existing_edge_keys: Sequence[str],
    ) -> TransactionFlows:
        raise NotImplementedError

    # --- One page of an account's transfers ---

    @abstractmethod
    async def fetch_account_flows(
        self,
        account_key: str,
        direction: FlowDirection,
        sort: SortOrder,
        limit: int,
        existing_node_keys: Sequence[str],
        existing_edge_keys: Sequence[str],
        page: int,
    ) -> AccountFlows:
        raise NotImplementedError

    # --- Account label / tags ---

    @abstractmethod
    async def fetch_account_metadata(self, account_key: str) -> AccountMetadata:
        raise NotImplementedError
