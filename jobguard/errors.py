"""User-facing exceptions for jobguard.

Only two conditions are raised as exceptions: a rate-limited request that
the caller asked us to block, and an upload whose bytes could not be read.
Content validation failures are returned as data, never raised.
"""

from __future__ import annotations

import math


class JobGuardError(Exception):
    """Base class for all jobguard errors."""

    def __init__(self, message: str, *, hint: str = "") -> None:
        self.hint = hint
        super().__init__(message)


class RateLimitExceededError(JobGuardError):
    """An action was denied by its rate-limit policy."""

    def __init__(self, policy: str, retry_after: float) -> None:
        self.policy = policy
        self.retry_after = max(0.0, retry_after)
        super().__init__(
            f"Too many {policy} attempts. Please try again in {self.minutes_left} minutes.",
            hint="Retry timing is up to the caller; nothing is retried automatically.",
        )

    @property
    def minutes_left(self) -> int:
        return math.ceil(self.retry_after / 60)


class FileReadError(JobGuardError):
    """The leading bytes of an upload could not be read.

    This means the file could not be judged at all, which is different
    from a file that was judged invalid.
    """

    def __init__(self, filename: str = "") -> None:
        self.filename = filename
        super().__init__(
            "Unable to read file for security validation",
            hint="Ask the user to select the file again.",
        )


class ConfigError(JobGuardError):
    """The config file exists but could not be read or parsed."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        super().__init__(
            f"Could not load config from {path}: {reason}",
            hint="Fix the JSON or delete the file to use the defaults.",
        )
