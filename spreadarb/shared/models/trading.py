"""
Trading Data Model
==================
Immutable value types flowing through one pipeline cycle:

    Quote -> Opportunity -> Route -> Bundle -> SubmissionResult

None of these outlive a single ExecutionLoop iteration.
"""

from __future__ import annotations

import base64
import time
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from solders.address_lookup_table_account import AddressLookupTableAccount
from solders.instruction import Instruction
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from spreadarb.shared.execution.errors import BundleSigningError


class ConfidenceLevel(Enum):
    """Oracle-reported quote reliability."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def parse(cls, raw: Any) -> Optional["ConfidenceLevel"]:
        """Lenient parse; unknown values map to None."""
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class Quote:
    """Buy/sell quote for one asset from one fetch."""

    asset_id: str
    buy_price: Decimal
    sell_price: Decimal
    confidence: ConfidenceLevel
    observed_at: float = field(default_factory=time.time)


@dataclass(frozen=True)
class Opportunity:
    """Asset whose spread passed the threshold and confidence gate."""

    asset_id: str
    buy_price: Decimal
    sell_price: Decimal
    spread_pct: Decimal  # fraction, e.g. 0.003 == 0.3%
    confidence: ConfidenceLevel
    detected_at: float

    @property
    def profit_percentage(self) -> str:
        """Spread rendered as a percentage string for logs."""
        return f"{self.spread_pct * 100:.4f}"


@dataclass(frozen=True)
class RouteHop:
    """One venue step of a swap route."""

    venue: str
    amm_key: str
    input_mint: str
    output_mint: str
    in_amount: int
    out_amount: int
    fee_amount: int = 0


@dataclass(frozen=True)
class Route:
    """Executable swap route with its trade instructions."""

    input_asset: str
    output_asset: str
    input_amount: int  # atomic units
    expected_output_amount: int
    hops: Tuple[RouteHop, ...]
    max_slippage_bps: int
    price_impact_pct: float = 0.0
    instructions: Tuple[Instruction, ...] = ()
    lookup_tables: Tuple[AddressLookupTableAccount, ...] = ()

    @property
    def venues(self) -> str:
        return " → ".join(hop.venue for hop in self.hops) or "direct"


class BundleStatus(Enum):
    """Relay-reported bundle status."""

    PENDING = "pending"
    LANDED = "landed"
    FAILED = "failed"
    UNKNOWN = "unknown"

    @property
    def is_terminal(self) -> bool:
        return self in (BundleStatus.LANDED, BundleStatus.FAILED)


@dataclass(frozen=True)
class Bundle:
    """
    Ordered, fully signed instruction set ready for the relay.

    Trade instructions come first, the single tip transfer last.
    Construction fails unless every required signature is present.
    """

    instructions: Tuple[Instruction, ...]
    tip_account: Pubkey
    tip_lamports: int
    recent_blockhash: str
    fee_payer: Pubkey
    transaction: VersionedTransaction
    signatures: Tuple[Signature, ...] = ()

    def __post_init__(self):
        sigs = tuple(self.transaction.signatures)
        required = self.transaction.message.header.num_required_signatures
        if len(sigs) != required or any(sig == Signature.default() for sig in sigs):
            raise BundleSigningError(
                f"transaction carries {len(sigs)} signature(s), {required} required, "
                "partial signing is not submittable"
            )
        object.__setattr__(self, "signatures", sigs)

    @property
    def tip_instruction(self) -> Instruction:
        return self.instructions[-1]

    @property
    def trade_instructions(self) -> Tuple[Instruction, ...]:
        return self.instructions[:-1]

    def serialize(self) -> str:
        """Base64 wire encoding of the signed transaction."""
        return base64.b64encode(bytes(self.transaction)).decode("utf-8")


@dataclass(frozen=True)
class SubmissionResult:
    """Relay status snapshot for a submitted bundle."""

    bundle_id: str
    status: BundleStatus = BundleStatus.PENDING
    raw_response: Optional[Dict[str, Any]] = None
    slot: Optional[int] = None
    attempts: int = 0

    @property
    def success(self) -> bool:
        return self.status == BundleStatus.LANDED

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal
