"""Time sources and the periodic cleanup scheduler.

Every limiter takes a Clock instead of reading wall time directly, so its
behaviour can be driven deterministically in tests. PeriodicCleanup is the
host application's handle on the background cleanup loop: nothing starts
on import, and the owner decides when it starts and stops.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import Protocol

from loguru import logger

DEFAULT_CLEANUP_INTERVAL = 5 * 60


class Clock(Protocol):
    def now(self) -> float:
        """Return the current monotonic time in seconds."""
        ...


class MonotonicClock:
    """Clock backed by time.monotonic()."""

    def now(self) -> float:
        return time.monotonic()


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start

    def now(self) -> float:
        return self._now

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("ManualClock cannot move backwards")
        self._now += seconds

    def set(self, value: float) -> None:
        if value < self._now:
            raise ValueError("ManualClock cannot move backwards")
        self._now = value


class PeriodicCleanup:
    """Invokes a cleanup callback every `interval_seconds` until stopped.

    The callback's return value (usually a count of removed records) is
    logged at DEBUG. Exceptions from the callback are logged and the loop
    keeps going.
    """

    def __init__(
        self,
        callback: Callable[[], int | None],
        interval_seconds: float = DEFAULT_CLEANUP_INTERVAL,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._callback = callback
        self._interval = interval_seconds
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None

    @property
    def interval_seconds(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task[None]:
        """Schedule the loop on the running event loop. Idempotent."""
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._run())
            logger.info("Rate limit cleanup started (interval: {}s)", self._interval)
        return self._task

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            # Only the loop task's own cancellation is expected here.
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
        logger.debug("Rate limit cleanup stopped")

    def run_once(self) -> int | None:
        try:
            removed = self._callback()
        except Exception as exc:
            logger.error("Rate limit cleanup failed: {}", exc)
            return None
        if removed:
            logger.debug("Rate limit cleanup removed {} record(s)", removed)
        return removed

    async def _run(self) -> None:
        while True:
            await self._sleep(self._interval)
            self.run_once()
