"""
RelaySubmitter Unit Tests
=========================
Submission, status mapping and bounded polling against a scripted relay.
"""

from unittest.mock import MagicMock

import pytest

from spreadarb.execution.bundle_submitter import RelaySubmitter, interpret_status
from spreadarb.shared.execution.errors import ErrorCode, SubmitError
from spreadarb.shared.execution.execution_result import Err, Ok
from spreadarb.shared.models.trading import BundleStatus
from tests.mocks.mock_jito import (
    MockJitoClient,
    empty_status,
    failed_status,
    landed_status,
    pending_status,
    status_body,
)


def fake_bundle(payload: str = "AQID"):
    bundle = MagicMock()
    bundle.serialize.return_value = payload
    return bundle


def make_submitter(jito, clock, max_polls: int = 3) -> RelaySubmitter:
    return RelaySubmitter(jito, max_status_polls=max_polls, sleep=clock.sleep)


class TestInterpretStatus:
    def test_empty_value_is_unknown(self):
        assert interpret_status("b", empty_status()).status == BundleStatus.UNKNOWN

    def test_missing_result_is_unknown(self):
        assert interpret_status("b", {"jsonrpc": "2.0"}).status == BundleStatus.UNKNOWN

    def test_confirmed_is_landed(self):
        result = interpret_status("b", landed_status(slot=99))
        assert result.status == BundleStatus.LANDED
        assert result.slot == 99
        assert result.success

    def test_finalized_without_err_is_landed(self):
        assert interpret_status("b", status_body("finalized")).status == BundleStatus.LANDED

    def test_err_is_failed(self):
        result = interpret_status("b", failed_status())
        assert result.status == BundleStatus.FAILED
        assert result.is_terminal
        assert not result.success

    def test_processed_is_pending(self):
        result = interpret_status("b", pending_status())
        assert result.status == BundleStatus.PENDING
        assert not result.is_terminal


class TestSubmit:
    @pytest.mark.asyncio
    async def test_submit_returns_bundle_id(self, clock):
        jito = MockJitoClient(bundle_id="bundle-123")
        submitter = make_submitter(jito, clock)

        result = await submitter.submit(fake_bundle("BASE64TX"))

        assert isinstance(result, Ok)
        assert result.value.bundle_id == "bundle-123"
        assert result.value.status == BundleStatus.PENDING
        assert jito.sent == [["BASE64TX"]]

    @pytest.mark.asyncio
    async def test_relay_error_payload_is_err(self, clock):
        jito = MockJitoClient(bundle_id=None)
        submitter = make_submitter(jito, clock)

        result = await submitter.submit(fake_bundle())

        assert isinstance(result, Err)
        assert result.error.code == ErrorCode.BUNDLE_REJECTED
        assert submitter.get_stats()["failures"] == 1

    @pytest.mark.asyncio
    async def test_transport_error_is_err(self, clock):
        jito = MockJitoClient()
        jito.send_error = SubmitError("sendBundle transport error: reset")
        submitter = make_submitter(jito, clock)

        result = await submitter.submit(fake_bundle())

        assert isinstance(result, Err)
        assert result.error.code == ErrorCode.RELAY_TRANSPORT


class TestWaitForTerminal:
    @pytest.mark.asyncio
    async def test_landed_after_pending(self, clock):
        jito = MockJitoClient()
        jito.script_statuses([pending_status(), landed_status()])
        submitter = make_submitter(jito, clock, max_polls=5)

        result = await submitter.wait_for_terminal("mock-bundle-id")

        assert result.status == BundleStatus.LANDED
        assert result.attempts == 2
        assert jito.status_calls == 2

    @pytest.mark.asyncio
    async def test_failed_stops_polling(self, clock):
        jito = MockJitoClient()
        jito.script_statuses([failed_status(), landed_status()])
        submitter = make_submitter(jito, clock, max_polls=5)

        result = await submitter.wait_for_terminal("mock-bundle-id")

        assert result.status == BundleStatus.FAILED
        assert jito.status_calls == 1

    @pytest.mark.asyncio
    async def test_exhaustion_is_unknown_within_bound(self, clock):
        jito = MockJitoClient()
        jito.script_statuses([pending_status()] * 10)
        submitter = make_submitter(jito, clock, max_polls=3)

        result = await submitter.wait_for_terminal("mock-bundle-id")

        assert result.status == BundleStatus.UNKNOWN
        assert not result.success
        assert result.attempts == 3
        assert jito.status_calls == 3
        assert submitter.get_stats()["unknown"] == 1

    @pytest.mark.asyncio
    async def test_transport_errors_during_polling_are_not_failures(self, clock):
        jito = MockJitoClient()
        jito.script_statuses([SubmitError("timeout"), SubmitError("timeout")])
        submitter = make_submitter(jito, clock, max_polls=2)

        result = await submitter.wait_for_terminal("mock-bundle-id")

        assert result.status == BundleStatus.UNKNOWN
        assert submitter.get_stats()["failures"] == 0

    @pytest.mark.asyncio
    async def test_backoff_increases_and_caps(self, clock):
        jito = MockJitoClient()
        jito.script_statuses([pending_status()] * 10)
        submitter = RelaySubmitter(
            jito,
            max_status_polls=6,
            poll_initial_sec=1.0,
            poll_factor=2.0,
            poll_max_sec=5.0,
            sleep=clock.sleep,
        )

        await submitter.wait_for_terminal("mock-bundle-id")

        assert clock.sleeps == [1.0, 2.0, 4.0, 5.0, 5.0, 5.0]
