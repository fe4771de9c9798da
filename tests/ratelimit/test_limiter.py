"""Tests for jobguard.ratelimit.limiter: fixed-window limiter with block."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from jobguard.clock import ManualClock
from jobguard.ratelimit.limiter import KeyedRateLimiter, RateLimitConfig

WINDOW = 60.0
BLOCK = 300.0


@pytest.fixture
def limiter(clock: ManualClock) -> KeyedRateLimiter:
    config = RateLimitConfig(max_attempts=5, window_seconds=WINDOW, block_duration_seconds=BLOCK)
    return KeyedRateLimiter(config, clock=clock, name="test")


def _exhaust(limiter: KeyedRateLimiter, key: str, calls: int) -> list[bool]:
    return [limiter.is_allowed(key) for _ in range(calls)]


class TestRateLimitConfig:
    def test_block_defaults_to_twice_window(self):
        config = RateLimitConfig(max_attempts=3, window_seconds=30)
        assert config.block_duration_seconds == 60

    def test_block_default_applies_to_coerced_input(self):
        config = RateLimitConfig.model_validate({"max_attempts": "3", "window_seconds": "30"})
        assert config.window_seconds == 30
        assert config.block_duration_seconds == 60

    def test_explicit_none_block_uses_default(self):
        config = RateLimitConfig(max_attempts=3, window_seconds=30, block_duration_seconds=None)
        assert config.block_duration_seconds == 60

    def test_explicit_block_kept(self):
        config = RateLimitConfig(max_attempts=3, window_seconds=30, block_duration_seconds=45)
        assert config.block_duration_seconds == 45

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_attempts": 0, "window_seconds": 10},
            {"max_attempts": 1, "window_seconds": 0},
            {"max_attempts": 1, "window_seconds": 10, "block_duration_seconds": -1},
        ],
    )
    def test_rejects_non_positive_values(self, kwargs):
        with pytest.raises(ValidationError):
            RateLimitConfig(**kwargs)

    def test_is_immutable(self):
        config = RateLimitConfig(max_attempts=3, window_seconds=30)
        with pytest.raises(ValidationError):
            config.max_attempts = 10


class TestIsAllowed:
    def test_allows_up_to_max_then_blocks(self, limiter: KeyedRateLimiter):
        assert _exhaust(limiter, "user@example.com", 6) == [True] * 5 + [False]

    def test_block_reports_wait_within_block_duration(self, limiter: KeyedRateLimiter, clock: ManualClock):
        _exhaust(limiter, "k", 6)
        wait = limiter.get_time_until_unblocked("k")
        assert 0 < wait <= BLOCK

        clock.advance(10)
        assert limiter.is_allowed("k") is False
        assert limiter.get_time_until_unblocked("k") <= wait

    def test_hammering_blocked_key_does_not_extend_block(self, limiter: KeyedRateLimiter, clock: ManualClock):
        _exhaust(limiter, "k", 6)
        for _ in range(20):
            clock.advance(1)
            limiter.is_allowed("k")
        assert limiter.get_time_until_unblocked("k") == pytest.approx(BLOCK - 20)

    def test_block_outlasts_window(self, limiter: KeyedRateLimiter, clock: ManualClock):
        _exhaust(limiter, "k", 6)
        clock.advance(WINDOW + 1)
        assert limiter.is_allowed("k") is False

    def test_allowed_again_after_block_expires(self, limiter: KeyedRateLimiter, clock: ManualClock):
        _exhaust(limiter, "k", 6)
        clock.advance(BLOCK)
        assert limiter.is_allowed("k") is True
        assert limiter.get_time_until_unblocked("k") == 0.0
        assert limiter.get_remaining_attempts("k") == 4

    def test_window_expiry_restores_full_budget(self, limiter: KeyedRateLimiter, clock: ManualClock):
        _exhaust(limiter, "k", 3)
        clock.advance(WINDOW + 0.001)
        assert limiter.get_remaining_attempts("k") == 5
        assert limiter.is_allowed("k") is True
        assert limiter.get_remaining_attempts("k") == 4

    def test_exact_window_boundary_is_still_inside_window(self, limiter: KeyedRateLimiter, clock: ManualClock):
        _exhaust(limiter, "k", 5)
        clock.advance(WINDOW)
        assert limiter.is_allowed("k") is False

    def test_max_attempts_of_one(self, clock: ManualClock):
        limiter = KeyedRateLimiter(RateLimitConfig(max_attempts=1, window_seconds=10), clock=clock)
        assert limiter.is_allowed("k") is True
        assert limiter.is_allowed("k") is False
        assert limiter.get_time_until_unblocked("k") == pytest.approx(20)

    def test_keys_are_independent(self, limiter: KeyedRateLimiter):
        _exhaust(limiter, "alice", 6)
        assert limiter.is_allowed("bob") is True
        assert limiter.get_remaining_attempts("bob") == 4
        assert limiter.get_time_until_unblocked("bob") == 0.0


class TestReads:
    def test_remaining_for_unknown_key_is_max(self, limiter: KeyedRateLimiter):
        assert limiter.get_remaining_attempts("nobody") == 5

    def test_reads_do_not_create_records(self, limiter: KeyedRateLimiter):
        limiter.get_remaining_attempts("nobody")
        limiter.get_time_until_unblocked("nobody")
        assert len(limiter) == 0

    def test_remaining_decreases_and_floors_at_zero(self, limiter: KeyedRateLimiter):
        remaining = []
        for _ in range(7):
            limiter.is_allowed("k")
            remaining.append(limiter.get_remaining_attempts("k"))
        assert remaining == [4, 3, 2, 1, 0, 0, 0]

    def test_check_packages_decision(self, limiter: KeyedRateLimiter):
        first = limiter.check("k")
        assert first.allowed is True
        assert first.remaining == 4
        assert first.retry_after == 0.0

        _exhaust(limiter, "k", 4)
        denied = limiter.check("k")
        assert denied.allowed is False
        assert denied.remaining == 0
        assert denied.retry_after == pytest.approx(BLOCK)


class TestReset:
    def test_reset_unblocks_key(self, limiter: KeyedRateLimiter):
        _exhaust(limiter, "k", 6)
        limiter.reset("k")
        assert limiter.is_allowed("k") is True
        assert limiter.get_time_until_unblocked("k") == 0.0

    def test_reset_unknown_key_is_noop(self, limiter: KeyedRateLimiter):
        limiter.reset("never-seen")
        assert len(limiter) == 0


class TestCleanup:
    def test_removes_expired_unblocked_records(self, limiter: KeyedRateLimiter, clock: ManualClock):
        limiter.is_allowed("a")
        limiter.is_allowed("b")
        clock.advance(WINDOW + 1)
        assert limiter.cleanup() == 2
        assert len(limiter) == 0

    def test_keeps_records_inside_window(self, limiter: KeyedRateLimiter, clock: ManualClock):
        limiter.is_allowed("a")
        clock.advance(WINDOW / 2)
        assert limiter.cleanup() == 0
        assert len(limiter) == 1

    def test_never_removes_blocked_record(self, limiter: KeyedRateLimiter, clock: ManualClock):
        _exhaust(limiter, "k", 6)
        clock.advance(WINDOW + 1)
        assert limiter.cleanup() == 0
        assert limiter.is_allowed("k") is False

    def test_removes_record_once_block_has_lapsed(self, limiter: KeyedRateLimiter, clock: ManualClock):
        _exhaust(limiter, "k", 6)
        clock.advance(BLOCK + 1)
        assert limiter.cleanup() == 1
        assert limiter.get_remaining_attempts("k") == 5
