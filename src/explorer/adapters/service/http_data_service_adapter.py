from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional, Sequence

import requests

from explorer.adapters.service.payloads import (
    parse_account_flows,
    parse_account_metadata,
    parse_transaction_flows,
)
from explorer.adapters.service.rate_limiter import SimpleRateLimiter, backoff_sleep
from explorer.config import settings
from explorer.core.dto import AccountFlows, AccountMetadata, TransactionFlows
from explorer.core.enums import FlowDirection, SortOrder
from explorer.core.errors import DataSourceError, RateLimitError
from explorer.ports.data_service_port import DataServicePort

logger = logging.getLogger(__name__)


class HttpDataServiceAdapter(DataServicePort):
    """
    Talks to the flow indexing service over HTTP.

    ``requests`` is blocking, so every call runs in a worker thread and the
    event loop stays free for other expansions.
    """

    def __init__(
        self,
        base_url: str = settings.DATA_SERVICE_BASE_URL,
        requests_per_sec: float = settings.DATA_SERVICE_REQUESTS_PER_SEC,
        timeout_sec: int = settings.DATA_SERVICE_TIMEOUT_SEC,
        max_retries: int = settings.DATA_SERVICE_MAX_RETRIES,
        session: Optional[requests.Session] = None,
    ) -> None:
        if max_retries <= 0:
            raise ValueError("max_retries must be > 0")
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_sec
        self._max_retries = max_retries
        self._rl = SimpleRateLimiter(requests_per_sec)
        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    # ---------- internal ----------

    def _call(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self._base_url}/{path.lstrip('/')}"
        last_err: Optional[Exception] = None

        for attempt in range(self._max_retries):
            try:
                self._rl.wait()
                resp = self._session.request(
                    method,
                    url,
                    params=params,
                    json=body,
                    timeout=self._timeout,
                )
                if resp.status_code == 429:
                    last_err = RateLimitError(f"{url} rate limited")
                    backoff_sleep(attempt)
                    continue
                resp.raise_for_status()
                return resp.json()

            except Exception as e:
                last_err = e
                logger.debug(f"{method} {url} failed (attempt {attempt + 1}/{self._max_retries}): {e}")
                if attempt + 1 < self._max_retries:
                    backoff_sleep(attempt)

        raise DataSourceError(f"Data service failed after retries: {last_err}")

    @staticmethod
    def _hint(existing_node_keys: Sequence[str], existing_edge_keys: Sequence[str]) -> Dict[str, Any]:
        return {
            "existingNodes": list(existing_node_keys),
            "existingEdges": list(existing_edge_keys),
        }

    # ---------- port methods ----------

    def get_transaction_flows(
        self,
        transaction_id: str,
        existing_node_keys: Sequence[str],
        existing_edge_keys: Sequence[str],
    ) -> TransactionFlows:
        data = self._call(
            "POST",
            f"transaction_flows/{transaction_id}",
            body=self._hint(existing_node_keys, existing_edge_keys),
        )
        return parse_transaction_flows(data)

    def get_account_flows(
        self,
        account_key: str,
        direction: FlowDirection,
        sort: SortOrder,
        limit: int,
        existing_node_keys: Sequence[str],
        existing_edge_keys: Sequence[str],
        page: int,
    ) -> AccountFlows:
        data = self._call(
            "POST",
            f"account_flows/{account_key}",
            params={
                "direction": FlowDirection(direction).value,
                "sort": SortOrder(sort).value,
                "limit": int(limit),
                "page": int(page),
            },
            body=self._hint(existing_node_keys, existing_edge_keys),
        )
        return parse_account_flows(data)

    def get_account_metadata(self, account_key: str) -> AccountMetadata:
        data = self._call("GET", f"account/{account_key}")
        return parse_account_metadata(account_key, data)

    async def fetch_transaction_flows(self, transaction_id, existing_node_keys, existing_edge_keys):
        return await asyncio.to_thread(
            self.get_transaction_flows, transaction_id, existing_node_keys, existing_edge_keys
        )

    async def fetch_account_flows(
        self, account_key, direction, sort, limit, existing_node_keys, existing_edge_keys, page
    ):
        return await asyncio.to_thread(
            self.get_account_flows,
            account_key,
            direction,
            sort,
            limit,
            existing_node_keys,
            existing_edge_keys,
            page,
        )

    async def fetch_account_metadata(self, account_key):
        return await asyncio.to_thread(self.get_account_metadata, account_key)
