# Copyright 2025 t54 labs
# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from .errors import GatewayError

logger = logging.getLogger(__name__)


def _json_body(r: httpx.Response, route: str) -> Dict[str, Any]:
    if (r.headers.get("content-type") or "").split(";", 1)[0].strip().lower() != "application/json":
        raise GatewayError(f"invalid content-type from {route}", status_code=r.status_code)
    return r.json()


class GatewayClient:
    """HTTP access to a Request Network node (the "gateway")."""

    def __init__(self, base_url: str, *, timeout_s: float = 15.0, http: Optional[httpx.AsyncClient] = None):
        if not base_url:
            raise ValueError("base_url required for GatewayClient")
        self.base_url = base_url.rstrip("/")
        self.http = http or httpx.AsyncClient(timeout=timeout_s)

    async def _get(self, route: str, params: Dict[str, Any]) -> httpx.Response:
        try:
            return await self.http.get(f"{self.base_url}{route}", params=params)
        except httpx.HTTPError as e:
            raise GatewayError(f"{route} unreachable: {e}") from e

    async def persist_transaction(
        self, *, channel_id: str, transaction_data: Dict[str, Any], topics: List[str]
    ) -> Dict[str, Any]:
        try:
            r = await self.http.post(
                f"{self.base_url}/persistTransaction",
                json={"channelId": channel_id, "transactionData": transaction_data, "topics": topics},
            )
        except httpx.HTTPError as e:
            raise GatewayError(f"/persistTransaction unreachable: {e}") from e
        if r.status_code >= 400:
            raise GatewayError(f"/persistTransaction failed: {r.text}", status_code=r.status_code)
        return _json_body(r, "/persistTransaction")

    async def get_confirmed_transaction(self, transaction_hash: str) -> Optional[Dict[str, Any]]:
        """Return the confirmed transaction, or None while the node has not confirmed it yet."""
        r = await self._get("/getConfirmedTransaction", {"transactionHash": transaction_hash})
        if r.status_code == 404:
            return None
        if r.status_code >= 400:
            raise GatewayError(f"/getConfirmedTransaction failed: {r.text}", status_code=r.status_code)
        return _json_body(r, "/getConfirmedTransaction")

    async def get_transactions_by_channel_id(self, channel_id: str) -> List[Dict[str, Any]]:
        r = await self._get("/getTransactionsByChannelId", {"channelId": channel_id})
        if r.status_code >= 400:
            raise GatewayError(f"/getTransactionsByChannelId failed: {r.text}", status_code=r.status_code)
        body = _json_body(r, "/getTransactionsByChannelId")
        result = body.get("result") or {}
        transactions = result.get("transactions") or []
        logger.debug("channel %s: %d transaction(s)", channel_id, len(transactions))
        return transactions

    async def get_information(self) -> Dict[str, Any]:
        r = await self._get("/information", {})
        if r.status_code >= 400:
            raise GatewayError(f"/information failed: {r.text}", status_code=r.status_code)
        return _json_body(r, "/information")

    async def aclose(self) -> None:
        await self.http.aclose()
