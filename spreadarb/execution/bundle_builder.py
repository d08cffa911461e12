"""
Bundle Builder
==============
Pure, in-memory assembly of an atomic Jito bundle.

Order:
1. Trade instructions from the route (compute budget, setup, swap, cleanup)
2. Exactly one Jito tip transfer, last

All instructions are compiled into one v0 message and signed once by
the fee payer. A Bundle is either returned fully signed or not at all.
"""

from __future__ import annotations

from typing import List, Optional

from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import VersionedTransaction

from spreadarb.execution.tip_selector import RandomTipSelector, TipSelector
from spreadarb.shared.config.tip_accounts import TipAccountSnapshot
from spreadarb.shared.execution.errors import BundleSigningError
from spreadarb.shared.models.trading import Bundle, Route
from spreadarb.shared.system.logging import Logger


class BundleBuilder:
    """
    Usage:
        builder = BundleBuilder(wallet.keypair)
        bundle = builder.build(route, 100_000, registry.current(), blockhash)
    """

    MAX_INSTRUCTIONS = 64

    def __init__(self, keypair: Keypair, tip_selector: Optional[TipSelector] = None):
        self.keypair = keypair
        self.payer: Pubkey = keypair.pubkey()
        self.tip_selector = tip_selector or RandomTipSelector()

        self._built = 0

    def build_tip_instruction(self, lamports: int, tip_account: Pubkey) -> Instruction:
        return transfer(
            TransferParams(
                from_pubkey=self.payer,
                to_pubkey=tip_account,
                lamports=lamports,
            )
        )

    def build(
        self,
        route: Route,
        tip_lamports: int,
        tip_snapshot: TipAccountSnapshot,
        recent_blockhash: str,
    ) -> Bundle:
        """
        Raises:
            BundleSigningError: on invalid input or any compile/sign failure.
        """
        if tip_lamports <= 0:
            raise BundleSigningError(f"tip must be positive, got {tip_lamports}")
        if not route.instructions:
            raise BundleSigningError("route carries no trade instructions")
        if not tip_snapshot.accounts:
            raise BundleSigningError("tip account pool is empty")

        try:
            tip_account = Pubkey.from_string(self.tip_selector.select(tip_snapshot.accounts))
            instructions: List[Instruction] = list(route.instructions)
            instructions.append(self.build_tip_instruction(tip_lamports, tip_account))

            if len(instructions) > self.MAX_INSTRUCTIONS:
                raise BundleSigningError(f"Too many instructions: {len(instructions)}")

            message = MessageV0.try_compile(
                payer=self.payer,
                instructions=instructions,
                address_lookup_table_accounts=list(route.lookup_tables),
                recent_blockhash=Hash.from_string(recent_blockhash),
            )
            tx = VersionedTransaction(message, [self.keypair])

            bundle = Bundle(
                instructions=tuple(instructions),
                tip_account=tip_account,
                tip_lamports=tip_lamports,
                recent_blockhash=recent_blockhash,
                fee_payer=self.payer,
                transaction=tx,
            )
        except BundleSigningError:
            raise
        except Exception as e:
            raise BundleSigningError(f"bundle assembly failed: {e}") from e

        self._built += 1
        Logger.info(
            f"[BUNDLE] Bundle built: {len(instructions)} instructions | "
            f"tip {tip_lamports} lamports → {str(tip_account)[:8]}... (pool v{tip_snapshot.version})"
        )
        return bundle
