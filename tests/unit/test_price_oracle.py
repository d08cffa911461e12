"""
PriceOracleClient Unit Tests
============================
Jupiter Price API v2 decoding with a fake HTTP client.
"""

from decimal import Decimal

import httpx
import pytest

from spreadarb.feeds.price_oracle import PriceOracleClient
from spreadarb.shared.execution.errors import ErrorCode, OracleUnavailable
from spreadarb.shared.execution.execution_result import Err, Ok
from spreadarb.shared.models.trading import ConfidenceLevel
from tests.mocks.mock_feeds import JUP_MINT, SOL_MINT, price_entry, price_payload
from tests.mocks.mock_http import FakeHttpClient, json_response


def make_oracle(*responses):
    client = FakeHttpClient(list(responses))
    return PriceOracleClient("https://api.jup.ag/price/v2", http_client=client, clock=lambda: 42.0), client


class TestFetchQuotes:
    @pytest.mark.asyncio
    async def test_decodes_quotes_in_request_order(self):
        payload = price_payload({
            JUP_MINT: price_entry("1.000", "1.003"),
            SOL_MINT: price_entry("100", "100.2", "medium"),
        })
        oracle, client = make_oracle(json_response(200, payload))

        result = await oracle.fetch_quotes([SOL_MINT, JUP_MINT])

        assert isinstance(result, Ok)
        quotes = result.value
        assert list(quotes) == [SOL_MINT, JUP_MINT]
        assert quotes[SOL_MINT].buy_price == Decimal("100")
        assert quotes[SOL_MINT].sell_price == Decimal("100.2")
        assert quotes[SOL_MINT].confidence == ConfidenceLevel.MEDIUM
        assert quotes[JUP_MINT].confidence == ConfidenceLevel.HIGH
        assert quotes[JUP_MINT].observed_at == 42.0

    @pytest.mark.asyncio
    async def test_request_parameters(self):
        oracle, client = make_oracle(json_response(200, price_payload({})))

        await oracle.fetch_quotes([SOL_MINT, JUP_MINT])

        method, url, kwargs = client.calls[0]
        assert method == "GET"
        assert url == "https://api.jup.ag/price/v2"
        assert kwargs["params"] == {"ids": f"{SOL_MINT},{JUP_MINT}", "showExtraInfo": "true"}

    @pytest.mark.asyncio
    async def test_numeric_prices_accepted(self):
        payload = price_payload({SOL_MINT: price_entry(100.5, 100.7)})
        oracle, _ = make_oracle(json_response(200, payload))

        result = await oracle.fetch_quotes([SOL_MINT])

        assert result.value[SOL_MINT].buy_price == Decimal("100.5")

    @pytest.mark.asyncio
    async def test_http_500_is_err(self):
        oracle, _ = make_oracle(json_response(500, {"error": "internal"}))

        result = await oracle.fetch_quotes([SOL_MINT])

        assert isinstance(result, Err)
        assert isinstance(result.error, OracleUnavailable)
        assert result.error.code == ErrorCode.ORACLE_HTTP
        assert oracle.failures == 1

    @pytest.mark.asyncio
    async def test_transport_error_is_err(self):
        oracle, _ = make_oracle(httpx.ConnectError("connection refused"))

        result = await oracle.fetch_quotes([SOL_MINT])

        assert isinstance(result, Err)
        assert result.error.code == ErrorCode.ORACLE_TRANSPORT

    @pytest.mark.asyncio
    async def test_timeout_is_err(self):
        oracle, _ = make_oracle(httpx.ReadTimeout("timed out"))

        result = await oracle.fetch_quotes([SOL_MINT])

        assert result.error.code == ErrorCode.ORACLE_TRANSPORT

    @pytest.mark.asyncio
    async def test_missing_data_is_err(self):
        oracle, _ = make_oracle(json_response(200, {"timeTaken": 0.1}))

        result = await oracle.fetch_quotes([SOL_MINT])

        assert isinstance(result, Err)
        assert result.error.code == ErrorCode.ORACLE_PARSE

    @pytest.mark.asyncio
    async def test_invalid_json_is_err(self):
        bad = httpx.Response(200, content=b"<html>", request=httpx.Request("GET", "https://mock.local"))
        oracle, _ = make_oracle(bad)

        result = await oracle.fetch_quotes([SOL_MINT])

        assert result.error.code == ErrorCode.ORACLE_PARSE


class TestIncompleteEntries:
    @pytest.mark.asyncio
    async def test_missing_quoted_price_omitted(self):
        entry = price_entry("1", "1.1")
        del entry["extraInfo"]["quotedPrice"]
        payload = price_payload({JUP_MINT: entry, SOL_MINT: price_entry("100", "101")})
        oracle, _ = make_oracle(json_response(200, payload))

        result = await oracle.fetch_quotes([SOL_MINT, JUP_MINT])

        assert isinstance(result, Ok)
        assert list(result.value) == [SOL_MINT]

    @pytest.mark.asyncio
    async def test_missing_confidence_omitted(self):
        payload = price_payload({JUP_MINT: price_entry("1", "1.1", confidence=None)})
        oracle, _ = make_oracle(json_response(200, payload))

        result = await oracle.fetch_quotes([JUP_MINT])

        assert result.value == {}

    @pytest.mark.asyncio
    async def test_unknown_confidence_omitted(self):
        payload = price_payload({JUP_MINT: price_entry("1", "1.1", confidence="extreme")})
        oracle, _ = make_oracle(json_response(200, payload))

        result = await oracle.fetch_quotes([JUP_MINT])

        assert result.value == {}

    @pytest.mark.asyncio
    async def test_null_entry_omitted(self):
        payload = {"data": {SOL_MINT: None}}
        oracle, _ = make_oracle(json_response(200, payload))

        result = await oracle.fetch_quotes([SOL_MINT])

        assert result.value == {}

    @pytest.mark.asyncio
    async def test_non_positive_price_omitted(self):
        payload = price_payload({SOL_MINT: price_entry("0", "100")})
        oracle, _ = make_oracle(json_response(200, payload))

        result = await oracle.fetch_quotes([SOL_MINT])

        assert result.value == {}

    @pytest.mark.asyncio
    async def test_unparseable_price_omitted(self):
        payload = price_payload({SOL_MINT: price_entry("n/a", "100")})
        oracle, _ = make_oracle(json_response(200, payload))

        result = await oracle.fetch_quotes([SOL_MINT])

        assert result.value == {}
