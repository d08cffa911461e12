"""
Tick scheduler with explicit backoff state.

The loop asks for the next delay after each cycle; sleeping goes through
an injectable coroutine so tests can run on a fake clock.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Awaitable, Callable


class ScheduleMode(Enum):
    NORMAL = "NORMAL"
    BACKOFF = "BACKOFF"


class TickScheduler:
    def __init__(
        self,
        interval_sec: float = 1.0,
        error_multiplier: float = 5.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.interval_sec = interval_sec
        self.error_interval_sec = interval_sec * error_multiplier
        self.mode = ScheduleMode.NORMAL
        self._sleep = sleep

    def next_delay(self, ok: bool) -> float:
        self.mode = ScheduleMode.NORMAL if ok else ScheduleMode.BACKOFF
        return self.interval_sec if ok else self.error_interval_sec

    async def sleep(self, delay: float) -> None:
        await self._sleep(delay)

