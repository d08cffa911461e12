"""
Jupiter Price Oracle
====================
Buy/sell quotes with confidence from the Jupiter Price API v2.

    GET https://api.jup.ag/price/v2?ids=<mint,mint,...>&showExtraInfo=true

Response shape (per mint):
    {"data": {mint: {"extraInfo": {"quotedPrice": {"buyPrice", "sellPrice"},
                                    "confidenceLevel": "high"}}}}

Every call re-fetches; nothing is cached.
"""

from __future__ import annotations

import time
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Iterable, Optional

import httpx

from spreadarb.shared.execution.errors import ErrorCode, OracleUnavailable
from spreadarb.shared.execution.execution_result import Err, Ok, Result
from spreadarb.shared.models.trading import ConfidenceLevel, Quote
from spreadarb.shared.system.logging import Logger


class PriceOracleClient:
    """
    Usage:
        oracle = PriceOracleClient(Settings.JUPITER_PRICE_URL)
        result = await oracle.fetch_quotes([SOL_MINT, JUP_MINT])
    """

    PRICE_API_V2 = "https://api.jup.ag/price/v2"

    def __init__(
        self,
        api_url: str = PRICE_API_V2,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
        clock: Callable[[], float] = time.time,
    ):
        self.api_url = api_url
        self.timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None
        self._clock = clock

        # Stats
        self.fetches = 0
        self.failures = 0

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def fetch_quotes(
        self, asset_ids: Iterable[str]
    ) -> Result[Dict[str, Quote], OracleUnavailable]:
        """
        Fetch one quote per asset.

        Returns:
            Ok(mapping asset_id -> Quote) in request order, assets with
            incomplete data omitted; Err(OracleUnavailable) on transport,
            HTTP or payload failure. Never a partial batch on failure.
        """
        ids = list(dict.fromkeys(asset_ids))
        params = {"ids": ",".join(ids), "showExtraInfo": "true"}
        self.fetches += 1
        Logger.debug(f"[ORACLE] Fetching prices for {len(ids)} assets")

        try:
            response = await self._get_client().get(self.api_url, params=params)
        except httpx.HTTPError as e:
            return self._fail(f"transport error: {e}", ErrorCode.ORACLE_TRANSPORT)

        if not response.is_success:
            return self._fail(f"HTTP error! status: {response.status_code}", ErrorCode.ORACLE_HTTP)

        try:
            body = response.json()
        except ValueError:
            return self._fail("invalid JSON body", ErrorCode.ORACLE_PARSE)

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            return self._fail("Invalid price data structure", ErrorCode.ORACLE_PARSE)

        observed_at = self._clock()
        quotes: Dict[str, Quote] = {}
        for asset_id in ids:
            quote = self._parse_quote(asset_id, data.get(asset_id), observed_at)
            if quote is not None:
                quotes[asset_id] = quote

        Logger.info(f"[ORACLE] Price data received ({len(quotes)}/{len(ids)} quoted)")
        return Ok(quotes)

    def _fail(self, reason: str, code: ErrorCode) -> Err[OracleUnavailable]:
        self.failures += 1
        Logger.error(f"[ORACLE] Error fetching prices: {reason}")
        return Err(OracleUnavailable(reason, code))

    @staticmethod
    def _parse_quote(asset_id: str, entry: Any, observed_at: float) -> Optional[Quote]:
        """Decode one entry; anything incomplete is treated as absent."""
        if not isinstance(entry, dict):
            return None
        extra = entry.get("extraInfo")
        if not isinstance(extra, dict):
            return None
        quoted = extra.get("quotedPrice")
        if not isinstance(quoted, dict):
            return None

        confidence = ConfidenceLevel.parse(extra.get("confidenceLevel"))
        buy = _to_decimal(quoted.get("buyPrice"))
        sell = _to_decimal(quoted.get("sellPrice"))
        if confidence is None or buy is None or sell is None or buy <= 0 or sell <= 0:
            Logger.debug(f"[ORACLE] Incomplete quote for {asset_id[:8]}..., skipping")
            return None

        return Quote(
            asset_id=asset_id,
            buy_price=buy,
            sell_price=sell,
            confidence=confidence,
            observed_at=observed_at,
        )


def _to_decimal(raw: Any) -> Optional[Decimal]:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, ValueError):
        return None
    return value if value.is_finite() else None
