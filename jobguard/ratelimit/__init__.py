"""Rate limiting: keyed fixed-window limiter and the named policy registry."""

from jobguard.ratelimit.limiter import KeyedRateLimiter, RateLimitConfig, RateLimitDecision
from jobguard.ratelimit.policies import (
    DEFAULT_POLICIES,
    Policy,
    PolicyRegistry,
    cleanup_scheduler,
    default_registry,
)

__all__ = [
    "DEFAULT_POLICIES",
    "KeyedRateLimiter",
    "Policy",
    "PolicyRegistry",
    "RateLimitConfig",
    "RateLimitDecision",
    "cleanup_scheduler",
    "default_registry",
]
