"""
Trading configuration snapshot.

Components never read Settings directly; they receive a frozen
TradingConfig built once at startup.
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Tuple

from config.settings import Settings
from spreadarb.shared.execution.errors import ErrorCode, FatalConfigError


@dataclass(frozen=True)
class TradingConfig:
    # Endpoints
    rpc_url: str = "https://api.mainnet-beta.solana.com"
    jito_url: str = "https://frankfurt.mainnet.block-engine.jito.wtf/api/v1/bundles"
    price_api_url: str = "https://api.jup.ag/price/v2"
    jupiter_api_url: str = "https://quote-api.jup.ag/v6"
    http_timeout_sec: float = 10.0

    # Assets
    watched_assets: Tuple[str, ...] = ()
    quote_mint: str = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
    quote_decimals: int = 6

    # Strategy
    min_profit_threshold: Decimal = Decimal("0.0025")
    trade_amount: Decimal = Decimal("50")
    max_slippage_bps: int = 50

    # Jito
    tip_lamports: int = 100_000
    default_tip_accounts: Tuple[str, ...] = ()
    tip_refresh_sec: float = 300.0
    tip_selection: str = "random"

    # Cadence
    poll_interval_sec: float = 1.0
    error_backoff_multiplier: float = 5.0

    # Status polling
    max_status_polls: int = 10
    status_poll_initial_sec: float = 0.5
    status_poll_factor: float = 1.5
    status_poll_max_sec: float = 5.0

    @property
    def error_interval_sec(self) -> float:
        return self.poll_interval_sec * self.error_backoff_multiplier

    @property
    def trade_amount_atomic(self) -> int:
        """Trade size in quote-token atomic units (USDC: 6 decimals)."""
        return int(self.trade_amount * (10 ** self.quote_decimals))

    @classmethod
    def from_settings(cls) -> "TradingConfig":
        """
        Build the snapshot from env-backed Settings.

        Raises:
            FatalConfigError: if any numeric setting does not parse.
        """
        errors: List[str] = []

        def number(name: str, kind):
            raw = getattr(Settings, name)
            try:
                value = kind(str(raw).strip())
                if not math.isfinite(value):
                    raise ValueError(raw)
                return value
            except (ArithmeticError, TypeError, ValueError):
                errors.append(f"{name}={raw!r} is not a valid {kind.__name__}")
                return None

        numbers = dict(
            http_timeout_sec=number("HTTP_TIMEOUT_SEC", float),
            min_profit_threshold=number("MIN_PROFIT_THRESHOLD", Decimal),
            trade_amount=number("TRADE_AMOUNT_USDC", Decimal),
            max_slippage_bps=number("MAX_SLIPPAGE_BPS", int),
            tip_lamports=number("JITO_TIP_LAMPORTS", int),
            tip_refresh_sec=number("TIP_REFRESH_SEC", float),
            poll_interval_sec=number("POLL_INTERVAL_SEC", float),
            error_backoff_multiplier=number("ERROR_BACKOFF_MULTIPLIER", float),
            max_status_polls=number("MAX_STATUS_POLLS", int),
        )
        if errors:
            raise FatalConfigError("; ".join(errors), ErrorCode.CONFIG_INVALID)

        return cls(
            rpc_url=Settings.RPC_URL,
            jito_url=Settings.JITO_URL.rstrip("/") + Settings.JITO_BUNDLES_PATH,
            price_api_url=Settings.JUPITER_PRICE_URL,
            jupiter_api_url=Settings.JUPITER_API_URL,
            watched_assets=tuple(Settings.WATCHED_ASSETS),
            quote_mint=Settings.USDC_MINT,
            quote_decimals=Settings.USDC_DECIMALS,
            default_tip_accounts=tuple(Settings.JITO_TIP_ACCOUNTS),
            tip_selection=Settings.TIP_SELECTION,
            status_poll_initial_sec=Settings.STATUS_POLL_INITIAL_SEC,
            status_poll_factor=Settings.STATUS_POLL_FACTOR,
            status_poll_max_sec=Settings.STATUS_POLL_MAX_SEC,
            **numbers,
        )

    def validate(self) -> None:
        """
        Validate configuration.

        Raises:
            FatalConfigError: listing every invalid field.
        """
        errors: List[str] = []
        if self.min_profit_threshold < 0:
            errors.append("min_profit_threshold must be >= 0")
        if self.trade_amount <= 0:
            errors.append("trade_amount must be > 0")
        if self.tip_lamports <= 0:
            errors.append("tip_lamports must be > 0")
        if not 1 <= self.max_slippage_bps <= 10_000:
            errors.append("max_slippage_bps must be within 1..10000")
        if self.poll_interval_sec <= 0:
            errors.append("poll_interval_sec must be > 0")
        if self.error_backoff_multiplier < 1:
            errors.append("error_backoff_multiplier must be >= 1")
        if self.max_status_polls < 1:
            errors.append("max_status_polls must be >= 1")
        if not self.watched_assets:
            errors.append("watched_assets is empty")
        if not self.default_tip_accounts:
            errors.append("default_tip_accounts is empty")
        if self.tip_selection not in ("random", "round_robin"):
            errors.append(f"unknown tip_selection '{self.tip_selection}'")

        if errors:
            raise FatalConfigError("; ".join(errors), ErrorCode.CONFIG_INVALID)
