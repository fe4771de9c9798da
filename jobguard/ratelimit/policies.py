"""Named rate-limit policies for the job board's sensitive actions.

One KeyedRateLimiter per action class. Forms consult the registry before
submitting and reset the key after a successful submission; the request
wrapper maps outgoing URLs onto the same policies.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from enum import StrEnum

from jobguard.clock import Clock, MonotonicClock, PeriodicCleanup
from jobguard.errors import RateLimitExceededError
from jobguard.ratelimit.limiter import KeyedRateLimiter, RateLimitConfig, RateLimitDecision

_MINUTE = 60
_HOUR = 60 * _MINUTE


class Policy(StrEnum):
    AUTH = "auth"
    APPLICATION = "application"
    SEARCH = "search"
    CONTACT = "contact"


DEFAULT_POLICIES: dict[Policy, RateLimitConfig] = {
    Policy.AUTH: RateLimitConfig(
        max_attempts=5, window_seconds=15 * _MINUTE, block_duration_seconds=30 * _MINUTE
    ),
    Policy.APPLICATION: RateLimitConfig(
        max_attempts=10, window_seconds=_HOUR, block_duration_seconds=2 * _HOUR
    ),
    Policy.SEARCH: RateLimitConfig(
        max_attempts=100, window_seconds=_MINUTE, block_duration_seconds=5 * _MINUTE
    ),
    Policy.CONTACT: RateLimitConfig(
        max_attempts=3, window_seconds=_HOUR, block_duration_seconds=24 * _HOUR
    ),
}

# First matching fragment wins.
_ENDPOINT_ROUTES: tuple[tuple[str, Policy], ...] = (
    ("/search", Policy.SEARCH),
    ("/contact", Policy.CONTACT),
    ("/login", Policy.AUTH),
    ("/auth", Policy.AUTH),
    ("/applications", Policy.APPLICATION),
    ("/apply", Policy.APPLICATION),
)


class PolicyRegistry:
    """Holds one limiter per Policy.

    Missing entries in `configs` fall back to DEFAULT_POLICIES, so a
    partial override only needs to name the policies it changes.
    """

    def __init__(
        self,
        configs: Mapping[Policy, RateLimitConfig] | None = None,
        clock: Clock | None = None,
    ) -> None:
        merged = {**DEFAULT_POLICIES, **(configs or {})}
        clock = clock or MonotonicClock()
        self._limiters: dict[Policy, KeyedRateLimiter] = {
            Policy(policy): KeyedRateLimiter(config, clock=clock, name=str(policy))
            for policy, config in merged.items()
        }

    def __getitem__(self, policy: Policy | str) -> KeyedRateLimiter:
        return self.get(policy)

    def __iter__(self) -> Iterator[Policy]:
        return iter(self._limiters)

    def get(self, policy: Policy | str) -> KeyedRateLimiter:
        try:
            return self._limiters[Policy(policy)]
        except ValueError:
            raise KeyError(policy) from None

    def items(self) -> list[tuple[Policy, KeyedRateLimiter]]:
        return list(self._limiters.items())

    @staticmethod
    def for_endpoint(url: str) -> Policy | None:
        """Map a request URL to the policy that throttles it, if any."""
        for fragment, policy in _ENDPOINT_ROUTES:
            if fragment in url:
                return policy
        return None

    def check(self, policy: Policy | str, key: str) -> RateLimitDecision:
        return self.get(policy).check(key)

    @contextmanager
    def guard(self, policy: Policy | str, key: str) -> Iterator[RateLimitDecision]:
        """Count an attempt, run the body, and forgive the key on success.

        Raises RateLimitExceededError before the body runs if the key is
        over budget. If the body raises, the attempt stays counted.
        """
        limiter = self.get(policy)
        decision = limiter.check(key)
        if not decision.allowed:
            raise RateLimitExceededError(limiter.name, decision.retry_after)
        yield decision
        limiter.reset(key)

    def cleanup_all(self) -> int:
        return sum(limiter.cleanup() for limiter in self._limiters.values())


_default_registry: PolicyRegistry | None = None


def default_registry() -> PolicyRegistry:
    """Process-wide registry built from the loaded configuration."""
    global _default_registry
    if _default_registry is None:
        from jobguard.config.loader import load_config

        _default_registry = PolicyRegistry(load_config().rate_limits)
    return _default_registry


def reset_default_registry() -> None:
    global _default_registry
    _default_registry = None


def cleanup_scheduler(registry: PolicyRegistry | None = None) -> PeriodicCleanup | None:
    """Build the periodic cleanup for `registry` from configuration.

    Returns None when cleanup is disabled. The caller owns start()/stop().
    """
    from jobguard.config.loader import load_config

    cleanup = load_config().cleanup
    if not cleanup.enabled:
        return None
    if registry is None:
        registry = default_registry()
    return PeriodicCleanup(registry.cleanup_all, cleanup.interval_seconds)
