"""
Unit Test Configuration
=======================
Fixtures for pure logic tests - NO I/O ALLOWED.

All unit tests should be completely isolated from:
- Network (Price API, Jupiter, Jito, RPC)
- File system (except tmp_path)
"""

import pytest


# ============================================================================
# AUTOUSE: ENFORCE I/O ISOLATION
# ============================================================================


@pytest.fixture(autouse=True)
def isolate_unit_tests(monkeypatch):
    """
    Automatically disable all network I/O for unit tests.
    Any test that accidentally tries to make a network call will fail.
    """
    def block_network(*args, **kwargs):
        raise RuntimeError(
            "Network I/O detected in unit test! "
            "Inject a fake client from tests.mocks instead."
        )

    monkeypatch.setattr("httpx.AsyncClient.get", block_network)
    monkeypatch.setattr("httpx.AsyncClient.post", block_network)


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def clock():
    from tests.mocks.mock_clock import FakeClock
    return FakeClock()


@pytest.fixture
def mock_jito(tip_accounts):
    from tests.mocks.mock_jito import MockJitoClient
    return MockJitoClient(tip_accounts=list(tip_accounts))


@pytest.fixture
def mock_rpc():
    from tests.mocks.mock_rpc import MockRpcClient
    return MockRpcClient()
