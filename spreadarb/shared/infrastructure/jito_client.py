"""
Jito Block Engine Client (Async)
================================
Non-blocking JSON-RPC access to the Jito bundle endpoint.

Methods:
- sendBundle          (atomic bundle intake)
- getBundleStatuses   (landing status)
- getTipAccounts      (tip pool refresh)

API: https://<region>.mainnet.block-engine.jito.wtf/api/v1/bundles
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx

from spreadarb.shared.execution.errors import ErrorCode, SubmitError
from spreadarb.shared.system.logging import Logger


class JitoClient:
    """
    Thin JSON-RPC client. Transport and HTTP failures raise SubmitError;
    interpreting results is left to the caller.
    """

    REQUEST_TIMEOUT = 10

    def __init__(
        self,
        api_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.api_url = api_url
        self.timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None

        self._bundles_submitted = 0
        self._requests = 0
        self._errors = 0

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def _rpc_call(self, method: str, params: Optional[list] = None) -> Dict[str, Any]:
        payload = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params or []}
        self._requests += 1

        try:
            response = await self._get_client().post(self.api_url, json=payload)
        except httpx.HTTPError as e:
            self._errors += 1
            raise SubmitError(f"{method} transport error: {e}", ErrorCode.RELAY_TRANSPORT) from e

        if response.status_code != 200:
            self._errors += 1
            raise SubmitError(
                f"{method} HTTP {response.status_code}: {response.text[:200]}",
                ErrorCode.RELAY_TRANSPORT,
            )

        try:
            body = response.json()
        except ValueError as e:
            self._errors += 1
            raise SubmitError(f"{method} returned invalid JSON", ErrorCode.RELAY_TRANSPORT) from e

        if not isinstance(body, dict):
            self._errors += 1
            raise SubmitError(f"{method} returned {type(body).__name__}", ErrorCode.RELAY_TRANSPORT)
        return body

    async def send_bundle(self, encoded_transactions: List[str]) -> Dict[str, Any]:
        """sendBundle with base64-encoded signed transactions. Returns raw response."""
        body = await self._rpc_call("sendBundle", [encoded_transactions, {"encoding": "base64"}])
        self._bundles_submitted += 1
        return body

    async def get_bundle_statuses(self, bundle_ids: List[str]) -> Dict[str, Any]:
        return await self._rpc_call("getBundleStatuses", [bundle_ids])

    async def get_tip_accounts(self) -> List[str]:
        body = await self._rpc_call("getTipAccounts")
        accounts = body.get("result")
        if not isinstance(accounts, list):
            Logger.debug(f"[JITO] getTipAccounts unexpected result: {body}")
            return []
        return [str(a) for a in accounts if a]

    def get_stats(self) -> Dict[str, int]:
        return {
            "requests": self._requests,
            "bundles_submitted": self._bundles_submitted,
            "errors": self._errors,
        }
