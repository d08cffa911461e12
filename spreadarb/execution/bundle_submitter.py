"""
Bundle Submitter
================
Jito bundle submission and status polling.

The relay guarantees all-or-nothing execution of a bundle; this module
only hands over a valid bundle and interprets what the relay reports.

Responsibilities:
- sendBundle (one attempt per bundle, never resubmitted)
- getBundleStatuses polling with bounded, increasing backoff
- Mapping relay statuses onto BundleStatus
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

from spreadarb.shared.execution.errors import (
    ErrorCode,
    SubmitError,
    UnknownOutcome,
)
from spreadarb.shared.execution.execution_result import Err, Ok, Result
from spreadarb.shared.infrastructure.jito_client import JitoClient
from spreadarb.shared.models.trading import Bundle, BundleStatus, SubmissionResult
from spreadarb.shared.system.logging import Logger


LANDED_CONFIRMATIONS = ("confirmed", "finalized")


def interpret_status(bundle_id: str, body: Dict[str, Any], attempts: int = 0) -> SubmissionResult:
    """
    getBundleStatuses response -> SubmissionResult.

    result.value empty/absent  -> UNKNOWN
    err other than {"Ok": null} -> FAILED
    confirmed / finalized       -> LANDED
    anything else               -> PENDING
    """
    result = body.get("result")
    values = result.get("value") if isinstance(result, dict) else result
    if not values or not isinstance(values, list) or not isinstance(values[0], dict):
        return SubmissionResult(bundle_id, BundleStatus.UNKNOWN, body, attempts=attempts)

    record = values[0]
    err = record.get("err")
    slot = record.get("slot")
    if err is not None and err != {"Ok": None}:
        return SubmissionResult(bundle_id, BundleStatus.FAILED, body, slot, attempts)

    if record.get("confirmation_status") in LANDED_CONFIRMATIONS:
        return SubmissionResult(bundle_id, BundleStatus.LANDED, body, slot, attempts)

    return SubmissionResult(bundle_id, BundleStatus.PENDING, body, slot, attempts)


class RelaySubmitter:
    """
    Usage:
        submitter = RelaySubmitter(jito_client, max_status_polls=10)
        result = await submitter.submit(bundle)
        if isinstance(result, Ok):
            final = await submitter.wait_for_terminal(result.value.bundle_id)
    """

    def __init__(
        self,
        jito: JitoClient,
        max_status_polls: int = 10,
        poll_initial_sec: float = 0.5,
        poll_factor: float = 1.5,
        poll_max_sec: float = 5.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.jito = jito
        self.max_status_polls = max_status_polls
        self.poll_initial_sec = poll_initial_sec
        self.poll_factor = poll_factor
        self.poll_max_sec = poll_max_sec
        self._sleep = sleep

        # Statistics
        self._submissions = 0
        self._landed = 0
        self._failures = 0
        self._unknown = 0

    async def submit(self, bundle: Bundle) -> Result[SubmissionResult, SubmitError]:
        self._submissions += 1
        try:
            body = await self.jito.send_bundle([bundle.serialize()])
        except SubmitError as e:
            self._failures += 1
            Logger.error(f"[JITO] Error submitting bundle: {e}")
            return Err(e)

        bundle_id = body.get("result")
        if not bundle_id or not isinstance(bundle_id, str):
            self._failures += 1
            error = body.get("error") or "missing bundle id"
            Logger.error(f"[JITO] Submit failed: {error}")
            return Err(SubmitError(f"relay rejected bundle: {error}", ErrorCode.BUNDLE_REJECTED))

        Logger.info(f"[JITO] Bundle submitted: {bundle_id[:16]}...")
        return Ok(SubmissionResult(bundle_id, BundleStatus.PENDING, body))

    async def poll_status(self, bundle_id: str, attempt: int = 0) -> SubmissionResult:
        """Single status poll. Transport failures read as UNKNOWN."""
        try:
            body = await self.jito.get_bundle_statuses([bundle_id])
        except SubmitError as e:
            Logger.debug(f"[JITO] Status check error: {e}")
            return SubmissionResult(bundle_id, BundleStatus.UNKNOWN, None, attempts=attempt)
        return interpret_status(bundle_id, body, attempt)

    def backoff(self, attempt: int) -> float:
        """Delay before poll number `attempt` (1-based), capped."""
        return min(self.poll_initial_sec * (self.poll_factor ** (attempt - 1)), self.poll_max_sec)

    async def wait_for_terminal(self, bundle_id: str) -> SubmissionResult:
        """
        Poll until LANDED/FAILED or max_status_polls is exhausted.

        Exhaustion yields UNKNOWN: neither success nor failure is assumed.
        """
        last: Optional[SubmissionResult] = None
        for attempt in range(1, self.max_status_polls + 1):
            await self._sleep(self.backoff(attempt))
            last = await self.poll_status(bundle_id, attempt)

            if last.status == BundleStatus.LANDED:
                self._landed += 1
                Logger.success(f"[JITO] Bundle LANDED: {bundle_id[:16]}... (slot {last.slot})")
                return last
            if last.status == BundleStatus.FAILED:
                self._failures += 1
                Logger.warning(f"[JITO] Bundle FAILED: {bundle_id[:16]}...")
                return last

        self._unknown += 1
        outcome = UnknownOutcome(bundle_id, self.max_status_polls)
        Logger.critical(f"[JITO] {outcome}. Outcome ambiguous, NOT assumed successful")
        return SubmissionResult(
            bundle_id,
            BundleStatus.UNKNOWN,
            last.raw_response if last else None,
            last.slot if last else None,
            attempts=self.max_status_polls,
        )

    def get_stats(self) -> dict:
        return {
            "submissions": self._submissions,
            "landed": self._landed,
            "failures": self._failures,
            "unknown": self._unknown,
        }
