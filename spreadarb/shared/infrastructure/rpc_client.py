"""
Solana RPC access for the execution pipeline.

Wraps solana-py's AsyncClient with the three calls the pipeline needs:
latest blockhash, SOL balance and address lookup tables.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solders.address_lookup_table_account import (
    AddressLookupTable,
    AddressLookupTableAccount,
)
from solders.pubkey import Pubkey

from spreadarb.shared.system.logging import Logger


LAMPORTS_PER_SOL = 1_000_000_000


class SolanaRpc:
    """
    Usage:
        rpc = SolanaRpc(Settings.RPC_URL)
        blockhash = await rpc.get_latest_blockhash()
    """

    def __init__(self, rpc_url: str, client: Optional[AsyncClient] = None):
        self.rpc_url = rpc_url
        self._client = client or AsyncClient(rpc_url, commitment=Confirmed)

    async def close(self) -> None:
        await self._client.close()

    async def get_latest_blockhash(self) -> str:
        resp = await self._client.get_latest_blockhash(commitment=Confirmed)
        blockhash = str(resp.value.blockhash)
        Logger.debug(f"[RPC] Fresh blockhash: {blockhash[:16]}...")
        return blockhash

    async def get_balance_sol(self, pubkey: Pubkey) -> float:
        resp = await self._client.get_balance(pubkey, commitment=Confirmed)
        return resp.value / LAMPORTS_PER_SOL

    async def get_lookup_tables(
        self, addresses: Sequence[str]
    ) -> Tuple[AddressLookupTableAccount, ...]:
        """Fetch and decode address lookup tables; missing accounts are skipped."""
        if not addresses:
            return ()

        keys: List[Pubkey] = [Pubkey.from_string(a) for a in addresses]
        resp = await self._client.get_multiple_accounts(keys)

        tables = []
        for key, account in zip(keys, resp.value):
            if account is None:
                Logger.warning(f"[RPC] Lookup table {str(key)[:8]}... not found")
                continue
            table = AddressLookupTable.deserialize(bytes(account.data))
            tables.append(AddressLookupTableAccount(key=key, addresses=list(table.addresses)))
        return tuple(tables)
