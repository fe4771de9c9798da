"""Tests for jobguard.clock: manual clock and the periodic cleanup loop."""

from __future__ import annotations

import asyncio

import pytest

from jobguard.clock import ManualClock, MonotonicClock, PeriodicCleanup


class TestClocks:
    def test_monotonic_clock_never_decreases(self):
        clock = MonotonicClock()
        first = clock.now()
        assert clock.now() >= first

    def test_manual_clock_advances(self):
        clock = ManualClock(start=10.0)
        clock.advance(2.5)
        assert clock.now() == 12.5
        clock.set(20.0)
        assert clock.now() == 20.0

    def test_manual_clock_rejects_going_backwards(self):
        clock = ManualClock(start=10.0)
        with pytest.raises(ValueError):
            clock.advance(-1)
        with pytest.raises(ValueError):
            clock.set(5.0)


async def _spin(times: int = 20) -> None:
    for _ in range(times):
        await asyncio.sleep(0)


class TestPeriodicCleanup:
    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValueError):
            PeriodicCleanup(lambda: 0, interval_seconds=0)

    def test_run_once_returns_callback_result(self):
        cleanup = PeriodicCleanup(lambda: 3)
        assert cleanup.run_once() == 3

    def test_run_once_swallows_callback_errors(self):
        def boom() -> int:
            raise RuntimeError("boom")

        assert PeriodicCleanup(boom).run_once() is None

    @pytest.mark.asyncio
    async def test_loop_invokes_callback_at_interval(self):
        sleeps: list[float] = []
        runs: list[int] = []

        async def fake_sleep(seconds: float) -> None:
            sleeps.append(seconds)
            await asyncio.sleep(0)

        cleanup = PeriodicCleanup(lambda: runs.append(1) or 0, interval_seconds=300, sleep=fake_sleep)
        cleanup.start()
        assert cleanup.is_running
        await _spin()
        await cleanup.stop()

        assert not cleanup.is_running
        assert len(runs) >= 2
        assert set(sleeps) == {300}

    @pytest.mark.asyncio
    async def test_callback_errors_do_not_stop_loop(self):
        calls: list[int] = []

        def flaky() -> int:
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("first pass fails")
            return 0

        async def fake_sleep(seconds: float) -> None:
            await asyncio.sleep(0)

        cleanup = PeriodicCleanup(flaky, sleep=fake_sleep)
        cleanup.start()
        await _spin()
        await cleanup.stop()
        assert len(calls) >= 2

    @pytest.mark.asyncio
    async def test_start_is_idempotent_and_stop_is_safe_twice(self):
        async def fake_sleep(seconds: float) -> None:
            await asyncio.sleep(3600)

        cleanup = PeriodicCleanup(lambda: 0, sleep=fake_sleep)
        first = cleanup.start()
        assert cleanup.start() is first
        await cleanup.stop()
        await cleanup.stop()
        assert not cleanup.is_running

    @pytest.mark.asyncio
    async def test_stop_propagates_cancellation_of_caller(self):
        release = asyncio.Event()

        async def slow_to_cancel(seconds: float) -> None:
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                await release.wait()
                raise

        cleanup = PeriodicCleanup(lambda: 0, sleep=slow_to_cancel)
        cleanup.start()
        await _spin(2)

        stopper = asyncio.create_task(cleanup.stop())
        await _spin(2)
        stopper.cancel()
        release.set()

        with pytest.raises(asyncio.CancelledError):
            await stopper
        assert not cleanup.is_running
