"""
Execution Pipeline
==================
Route → bundle → relay.

Components:
- RouteResolver: Jupiter quote and swap-instruction resolution
- BundleBuilder: Pure, signed bundle assembly (trade ixs + tip)
- RelaySubmitter: Jito submission and status polling
"""

from spreadarb.execution.route_resolver import (
    JupiterClient,
    RouteResolver,
)

from spreadarb.execution.bundle_builder import BundleBuilder

from spreadarb.execution.bundle_submitter import (
    RelaySubmitter,
    interpret_status,
)

from spreadarb.execution.tip_selector import (
    TipSelector,
    RandomTipSelector,
    RoundRobinTipSelector,
    FixedTipSelector,
    get_tip_selector,
)


__all__ = [
    # Routing
    "JupiterClient",
    "RouteResolver",
    # Builder
    "BundleBuilder",
    # Submitter
    "RelaySubmitter",
    "interpret_status",
    # Tips
    "TipSelector",
    "RandomTipSelector",
    "RoundRobinTipSelector",
    "FixedTipSelector",
    "get_tip_selector",
]
