"""
PhantomSpread Test Mocks
========================
Reusable fakes for isolated testing.
"""

from tests.mocks.mock_clock import FakeClock
from tests.mocks.mock_http import FakeHttpClient, json_response
from tests.mocks.mock_jito import MockJitoClient
from tests.mocks.mock_rpc import MockRpcClient
from tests.mocks.mock_feeds import price_payload, price_entry, make_quote

__all__ = [
    "FakeClock",
    "FakeHttpClient",
    "json_response",
    "MockJitoClient",
    "MockRpcClient",
    "price_payload",
    "price_entry",
    "make_quote",
]
