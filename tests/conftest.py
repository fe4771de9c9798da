"""Shared test fixtures for the jobguard test suite.

The _isolate_jobguard_config fixture (autouse) prevents JobGuardConfig from
reading the user's real ~/.jobguard/config.json during tests, and the
process-wide policy registry is discarded after each test so attempt
counts never leak between tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from jobguard.clock import ManualClock
from jobguard.config.schema import JobGuardConfig
from jobguard.ratelimit.policies import PolicyRegistry, reset_default_registry


@pytest.fixture(autouse=True)
def _isolate_jobguard_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point both the JSON settings source and load_config() at temp files."""
    empty_config = tmp_path / "jobguard_test_config.json"
    empty_config.write_text("{}", encoding="utf-8")
    monkeypatch.setitem(JobGuardConfig.model_config, "json_file", empty_config)
    monkeypatch.setattr("jobguard.config.loader._DEFAULT_CONFIG_FILE", tmp_path / "missing.json")
    return empty_config


@pytest.fixture(autouse=True)
def _reset_registry():
    reset_default_registry()
    yield
    reset_default_registry()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock(start=1_000.0)


@pytest.fixture
def registry(clock: ManualClock) -> PolicyRegistry:
    return PolicyRegistry(clock=clock)

