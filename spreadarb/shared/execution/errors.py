"""
Pipeline Error Taxonomy
=======================
Every failure the trading pipeline can produce.

All errors except FatalConfigError are cycle-local: the ExecutionLoop
catches them, logs them and backs off. FatalConfigError stops the process.
"""

from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """Standardized error codes for pipeline failures."""

    # Price oracle
    ORACLE_HTTP = "ORACLE_HTTP"
    ORACLE_TRANSPORT = "ORACLE_TRANSPORT"
    ORACLE_PARSE = "ORACLE_PARSE"

    # Routing
    NO_ROUTE = "NO_ROUTE"
    ROUTE_BUILD_FAILED = "ROUTE_BUILD_FAILED"

    # Bundle assembly
    SIGNING_FAILED = "SIGNING_FAILED"

    # Jito relay
    RELAY_TRANSPORT = "RELAY_TRANSPORT"
    BUNDLE_REJECTED = "BUNDLE_REJECTED"
    STATUS_UNKNOWN = "STATUS_UNKNOWN"

    # Startup
    CONFIG_INVALID = "CONFIG_INVALID"
    WALLET_MISSING = "WALLET_MISSING"

    UNKNOWN = "UNKNOWN"


class ArbitrageError(Exception):
    """Base exception for all pipeline errors."""

    default_code = ErrorCode.UNKNOWN

    def __init__(self, message: str, code: Optional[ErrorCode] = None):
        self.code = code or self.default_code
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class OracleUnavailable(ArbitrageError):
    """Price fetch failed (transport, HTTP status or payload shape)."""

    default_code = ErrorCode.ORACLE_TRANSPORT


class NoRouteFound(ArbitrageError):
    """No viable swap path for the requested pair."""

    default_code = ErrorCode.NO_ROUTE

    def __init__(self, input_asset: str, output_asset: str, reason: str = "no candidates",
                 code: Optional[ErrorCode] = None):
        self.input_asset = input_asset
        self.output_asset = output_asset
        super().__init__(f"{input_asset[:8]}→{output_asset[:8]}: {reason}", code)


class BundleSigningError(ArbitrageError):
    """Bundle could not be assembled and fully signed."""

    default_code = ErrorCode.SIGNING_FAILED


class SubmitError(ArbitrageError):
    """Relay rejected the bundle or was unreachable."""

    default_code = ErrorCode.RELAY_TRANSPORT


class UnknownOutcome(ArbitrageError):
    """Status polling exhausted without a terminal state."""

    default_code = ErrorCode.STATUS_UNKNOWN

    def __init__(self, bundle_id: str, attempts: int):
        self.bundle_id = bundle_id
        self.attempts = attempts
        super().__init__(f"bundle {bundle_id} has no terminal status after {attempts} polls")


class FatalConfigError(ArbitrageError):
    """Unrecoverable startup failure (missing wallet, invalid config)."""

    default_code = ErrorCode.CONFIG_INVALID
