"""In-memory fixed-window rate limiter with a punitive block.

Keyed by arbitrary string (email, user id, IP substitute). Each key gets a
counting window that opens on its first attempt; exceeding the budget
inside that window blocks the key for `block_duration_seconds`, which is
normally longer than the window itself so that waiting out the window is
not enough to get a full budget back.

State lives only in this process and is lost on restart. This is advisory
throttling for the UI layer; the backend enforces its own limits.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, model_validator

from jobguard.clock import Clock, MonotonicClock
from jobguard.logging import mask_key


class RateLimitConfig(BaseModel):
    """Budget for one policy. Durations are in seconds."""

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(gt=0)
    window_seconds: float = Field(gt=0)
    block_duration_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Denial period after the budget is exhausted. Defaults to twice the window.",
    )

    @model_validator(mode="after")
    def _default_block_duration(self) -> RateLimitConfig:
        # window_seconds is already coerced here, including string input from env vars.
        if self.block_duration_seconds is None:
            object.__setattr__(self, "block_duration_seconds", self.window_seconds * 2)
        return self


@dataclass
class AttemptRecord:
    count: int
    first_attempt: float
    blocked_until: float | None = None


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    """Outcome of a single check, with enough detail for user messaging."""

    allowed: bool
    remaining: int
    retry_after: float


class KeyedRateLimiter:
    """Fixed-window counter keyed by arbitrary string.

    Not thread-safe: callers are expected to share one event loop, where
    the synchronous methods below cannot interleave.
    """

    def __init__(
        self,
        config: RateLimitConfig,
        clock: Clock | None = None,
        name: str = "",
    ) -> None:
        self._config = config
        self._clock = clock or MonotonicClock()
        self._name = name or "default"
        self._attempts: dict[str, AttemptRecord] = {}

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    @property
    def name(self) -> str:
        return self._name

    def __len__(self) -> int:
        return len(self._attempts)

    def is_allowed(self, key: str) -> bool:
        """Record an attempt for `key` and report whether it may proceed.

        The checks run in a fixed order: an active block wins over an
        expired window, so hammering a blocked key neither extends nor
        lifts the block.
        """
        now = self._clock.now()
        record = self._attempts.get(key)

        if record is None:
            self._attempts[key] = AttemptRecord(count=1, first_attempt=now)
            return True

        if record.blocked_until is not None and now < record.blocked_until:
            return False

        if self._window_elapsed(record, now):
            self._attempts[key] = AttemptRecord(count=1, first_attempt=now)
            return True

        record.count += 1
        if record.count > self._config.max_attempts:
            record.blocked_until = now + self._config.block_duration_seconds
            logger.debug(
                "Rate limit '{}' blocked key {} for {:.0f}s",
                self._name,
                mask_key(key),
                self._config.block_duration_seconds,
            )
            return False

        return True

    def check(self, key: str) -> RateLimitDecision:
        """Like is_allowed(), but also report the remaining budget and wait time."""
        allowed = self.is_allowed(key)
        return RateLimitDecision(
            allowed=allowed,
            remaining=self.get_remaining_attempts(key),
            retry_after=0.0 if allowed else self.get_time_until_unblocked(key),
        )

    def get_remaining_attempts(self, key: str) -> int:
        record = self._attempts.get(key)
        if record is None:
            return self._config.max_attempts
        if self._window_elapsed(record, self._clock.now()):
            return self._config.max_attempts
        return max(0, self._config.max_attempts - record.count)

    def get_time_until_unblocked(self, key: str) -> float:
        """Seconds until `key` is unblocked, 0 if it is not blocked."""
        record = self._attempts.get(key)
        if record is None or record.blocked_until is None:
            return 0.0
        return max(0.0, record.blocked_until - self._clock.now())

    def reset(self, key: str) -> None:
        """Forget every attempt for `key`, e.g. after a successful login."""
        self._attempts.pop(key, None)

    def cleanup(self) -> int:
        """Drop records whose window has passed and which are not blocked.

        Returns the number of records removed.
        """
        now = self._clock.now()
        stale_keys = [
            key
            for key, record in self._attempts.items()
            if self._window_elapsed(record, now)
            and (record.blocked_until is None or now >= record.blocked_until)
        ]
        for key in stale_keys:
            del self._attempts[key]
        if stale_keys:
            logger.debug("Rate limit '{}' cleaned up {} record(s)", self._name, len(stale_keys))
        return len(stale_keys)

    def _window_elapsed(self, record: AttemptRecord, now: float) -> bool:
        return now - record.first_attempt > self._config.window_seconds
