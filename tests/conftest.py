"""
PhantomSpread Test Configuration
================================
Shared fixtures and pytest markers for the test suite.
"""

import os
import sys
from decimal import Decimal

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


# ============================================================================
# PYTEST MARKERS
# ============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "network: marks tests that require network access"
    )


# ============================================================================
# SHARED FIXTURES
# ============================================================================

@pytest.fixture
def tip_accounts():
    from config.settings import Settings
    return tuple(Settings.JITO_TIP_ACCOUNTS)


@pytest.fixture
def trading_config(tip_accounts):
    """Validated config with fast cadence for loop tests."""
    from spreadarb.shared.config.trading import TradingConfig
    from tests.mocks.mock_feeds import JUP_MINT, SOL_MINT, USDC_MINT

    return TradingConfig(
        watched_assets=(SOL_MINT, USDC_MINT, JUP_MINT),
        quote_mint=USDC_MINT,
        min_profit_threshold=Decimal("0.0025"),
        trade_amount=Decimal("50"),
        max_slippage_bps=50,
        tip_lamports=100_000,
        default_tip_accounts=tip_accounts,
        poll_interval_sec=1.0,
        error_backoff_multiplier=5.0,
        max_status_polls=3,
    )


@pytest.fixture
def keypair():
    from solders.keypair import Keypair
    return Keypair()
