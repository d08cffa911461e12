"""
Route Resolver - Jupiter API Integration
=======================================
Resolves an executable swap route for one input/output pair.

Jupiter Flow:
1. Get candidate quotes (multi-hop and direct-only)
2. Keep candidates within the slippage bound, pick max outAmount
3. Get raw swap instructions for the winner
4. Load the address lookup tables those instructions reference

Raw instructions (not a pre-built transaction) are requested so the tip
transfer can be compiled into the same message and signed exactly once.
"""

from __future__ import annotations

import base64
from typing import Any, Dict, List, Optional, Tuple

import httpx
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from spreadarb.shared.execution.errors import ErrorCode, NoRouteFound
from spreadarb.shared.execution.execution_result import Err, Ok, Result
from spreadarb.shared.models.trading import Route, RouteHop
from spreadarb.shared.system.logging import Logger


class JupiterClient:
    """
    Jupiter V6 API client for quotes and swap instructions.

    Returns None on any failure; the resolver decides what that means.
    """

    BASE_URL = "https://quote-api.jup.ag/v6"

    def __init__(
        self,
        base_url: str = BASE_URL,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None

        # Stats
        self.quotes_fetched = 0
        self.swaps_built = 0
        self.errors = 0

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout)
        return self._client

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def get_quote(
        self,
        input_mint: str,
        output_mint: str,
        amount: int,
        slippage_bps: int,
        only_direct_routes: bool = False,
    ) -> Optional[Dict[str, Any]]:
        params = {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(amount),
            "slippageBps": slippage_bps,
            "onlyDirectRoutes": str(only_direct_routes).lower(),
        }
        try:
            resp = await self._get_client().get(f"{self.base_url}/quote", params=params)
        except httpx.HTTPError as e:
            Logger.warning(f"[ROUTE] Quote transport error: {e}")
            self.errors += 1
            return None

        if resp.status_code != 200:
            Logger.warning(f"[ROUTE] Quote failed: {resp.status_code}")
            self.errors += 1
            return None

        try:
            data = resp.json()
        except ValueError:
            self.errors += 1
            return None

        if not isinstance(data, dict) or "error" in data:
            Logger.debug(f"[ROUTE] Quote rejected: {data}")
            return None

        self.quotes_fetched += 1
        return data

    async def get_swap_instructions(
        self,
        quote_response: Dict[str, Any],
        user_public_key: str,
        wrap_unwrap_sol: bool = True,
    ) -> Optional[Dict[str, Any]]:
        payload = {
            "quoteResponse": quote_response,
            "userPublicKey": user_public_key,
            "wrapAndUnwrapSol": wrap_unwrap_sol,
            "dynamicComputeUnitLimit": True,
        }
        try:
            resp = await self._get_client().post(f"{self.base_url}/swap-instructions", json=payload)
        except httpx.HTTPError as e:
            Logger.warning(f"[ROUTE] Swap instructions transport error: {e}")
            self.errors += 1
            return None

        if resp.status_code != 200:
            Logger.warning(f"[ROUTE] Swap instructions failed: {resp.status_code}")
            self.errors += 1
            return None

        try:
            data = resp.json()
        except ValueError:
            self.errors += 1
            return None

        if not isinstance(data, dict) or not data.get("swapInstruction"):
            Logger.warning("[ROUTE] No swap instruction in response")
            self.errors += 1
            return None

        self.swaps_built += 1
        return data

    def get_stats(self) -> Dict[str, int]:
        return {
            "quotes_fetched": self.quotes_fetched,
            "swaps_built": self.swaps_built,
            "errors": self.errors,
        }


def _as_int(raw: Any) -> Optional[int]:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _as_float(raw: Any) -> float:
    try:
        return float(raw or 0)
    except (TypeError, ValueError):
        return 0.0


def decode_instruction(raw: Dict[str, Any]) -> Instruction:
    """Jupiter JSON instruction -> solders Instruction."""
    accounts = [
        AccountMeta(
            pubkey=Pubkey.from_string(acc["pubkey"]),
            is_signer=bool(acc.get("isSigner", False)),
            is_writable=bool(acc.get("isWritable", False)),
        )
        for acc in raw.get("accounts", [])
    ]
    return Instruction(
        Pubkey.from_string(raw["programId"]),
        base64.b64decode(raw.get("data", "")),
        accounts,
    )


def collect_trade_instructions(swap_data: Dict[str, Any]) -> Tuple[Instruction, ...]:
    """Order: compute budget, setup, swap, cleanup."""
    raw: List[Dict[str, Any]] = []
    raw.extend(swap_data.get("computeBudgetInstructions") or [])
    raw.extend(swap_data.get("setupInstructions") or [])
    raw.append(swap_data["swapInstruction"])
    if swap_data.get("cleanupInstruction"):
        raw.append(swap_data["cleanupInstruction"])
    return tuple(decode_instruction(ix) for ix in raw)


def parse_hops(quote: Dict[str, Any]) -> Tuple[RouteHop, ...]:
    hops = []
    for step in quote.get("routePlan", []):
        info = step.get("swapInfo", {})
        hops.append(
            RouteHop(
                venue=info.get("label", "unknown"),
                amm_key=info.get("ammKey", ""),
                input_mint=info.get("inputMint", ""),
                output_mint=info.get("outputMint", ""),
                in_amount=int(info.get("inAmount", 0)),
                out_amount=int(info.get("outAmount", 0)),
                fee_amount=int(info.get("feeAmount", 0)),
            )
        )
    return tuple(hops)


class RouteResolver:
    """
    Usage:
        resolver = RouteResolver(jupiter, rpc, str(wallet.pubkey))
        result = await resolver.resolve(USDC_MINT, JUP_MINT, 50_000_000, 50)
    """

    def __init__(self, jupiter: JupiterClient, rpc: Any, user_public_key: str):
        self.jupiter = jupiter
        self.rpc = rpc
        self.user_public_key = user_public_key

    async def candidates(
        self,
        input_asset: str,
        output_asset: str,
        input_amount: int,
        max_slippage_bps: int,
    ) -> List[Dict[str, Any]]:
        """Quotes within the slippage bound, in discovery order."""
        found = []
        for only_direct in (False, True):
            quote = await self.jupiter.get_quote(
                input_asset, output_asset, input_amount, max_slippage_bps, only_direct
            )
            if quote is None:
                continue
            out_amount = _as_int(quote.get("outAmount"))
            slippage_bps = _as_int(quote.get("slippageBps", max_slippage_bps))
            if out_amount is None or slippage_bps is None:
                Logger.debug(f"[ROUTE] Malformed quote skipped: {quote}")
                continue
            if out_amount <= 0 or slippage_bps > max_slippage_bps:
                continue
            found.append(quote)
        return found

    async def resolve(
        self,
        input_asset: str,
        output_asset: str,
        input_amount: int,
        max_slippage_bps: int,
    ) -> Result[Route, NoRouteFound]:
        candidates = await self.candidates(input_asset, output_asset, input_amount, max_slippage_bps)
        if not candidates:
            Logger.warning("[ROUTE] No viable routes found for arbitrage")
            return Err(NoRouteFound(input_asset, output_asset))

        best = candidates[0]
        for quote in candidates[1:]:
            if int(quote["outAmount"]) > int(best["outAmount"]):
                best = quote

        swap_data = await self.jupiter.get_swap_instructions(best, self.user_public_key)
        if swap_data is None:
            return Err(NoRouteFound(
                input_asset, output_asset, "swap instructions unavailable",
                ErrorCode.ROUTE_BUILD_FAILED,
            ))

        try:
            instructions = collect_trade_instructions(swap_data)
            hops = parse_hops(best)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            return Err(NoRouteFound(
                input_asset, output_asset, f"undecodable swap data: {e}",
                ErrorCode.ROUTE_BUILD_FAILED,
            ))

        try:
            lookup_tables = await self.rpc.get_lookup_tables(
                swap_data.get("addressLookupTableAddresses") or []
            )
        except Exception as e:
            Logger.warning(f"[ROUTE] Lookup tables unavailable: {e}")
            return Err(NoRouteFound(
                input_asset, output_asset, f"lookup tables unavailable: {e}",
                ErrorCode.ROUTE_BUILD_FAILED,
            ))

        route = Route(
            input_asset=input_asset,
            output_asset=output_asset,
            input_amount=_as_int(best.get("inAmount")) or input_amount,
            expected_output_amount=int(best["outAmount"]),
            hops=hops,
            max_slippage_bps=max_slippage_bps,
            price_impact_pct=_as_float(best.get("priceImpactPct")),
            instructions=instructions,
            lookup_tables=lookup_tables,
        )
        Logger.info(
            f"[ROUTE] Route resolved: {route.venues} | in {route.input_amount} → "
            f"out {route.expected_output_amount} ({len(instructions)} ixs)"
        )
        return Ok(route)
