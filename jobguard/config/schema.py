"""Pydantic configuration models for jobguard.

All config is loaded from ~/.jobguard/config.json and can be overridden
via JOBGUARD_ prefixed environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.main import JsonConfigSettingsSource

from jobguard.files.presets import UploadKind
from jobguard.ratelimit.limiter import RateLimitConfig
from jobguard.ratelimit.policies import DEFAULT_POLICIES, Policy


class CleanupConfig(BaseModel):
    """Periodic removal of expired rate-limit records."""

    enabled: bool = True
    interval_seconds: int = Field(
        default=300,
        ge=1,
        le=86400,
        description="Seconds between cleanup passes over every policy's records.",
    )


class UploadsConfig(BaseModel):
    """Per-deployment tweaks to the upload validation presets."""

    max_size_overrides: dict[UploadKind, PositiveInt] = Field(
        default_factory=dict,
        description="Replace a preset's max_size (bytes), e.g. {'resume': 8388608}.",
    )


class SecurityConfig(BaseModel):
    """Request wrapper switches.

    rate_limit_key identifies the caller when the host has nothing better
    (no user id or email yet).
    """

    enable_rate_limit: bool = True
    enable_csrf: bool = True
    rate_limit_key: str = Field(default="anonymous", min_length=1)


class JobGuardConfig(BaseSettings):
    """Root configuration for jobguard.

    Loaded from ~/.jobguard/config.json with JOBGUARD_ env var overrides.
    Uses JsonConfigSettingsSource so pydantic-settings reads the JSON file
    and merges it with environment variable overrides.
    """

    model_config = SettingsConfigDict(
        env_prefix="JOBGUARD_",
        env_nested_delimiter="__",
        json_file=Path("~/.jobguard/config.json").expanduser(),
        json_file_encoding="utf-8",
        extra="ignore",
    )

    rate_limits: dict[Policy, RateLimitConfig] = Field(
        default_factory=lambda: dict(DEFAULT_POLICIES),
    )
    cleanup: CleanupConfig = Field(default_factory=CleanupConfig)
    uploads: UploadsConfig = Field(default_factory=UploadsConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """Enable JSON file loading alongside env vars and init kwargs."""
        return (
            init_settings,
            env_settings,
            JsonConfigSettingsSource(settings_cls),
        )
