"""Config file I/O: load from JSON, merge env vars, save back to disk."""

from __future__ import annotations

import json
from pathlib import Path

from loguru import logger

from jobguard.config.schema import JobGuardConfig
from jobguard.errors import ConfigError

_DEFAULT_CONFIG_DIR = Path.home() / ".jobguard"
_DEFAULT_CONFIG_FILE = _DEFAULT_CONFIG_DIR / "config.json"


def get_config_path() -> Path:
    return _DEFAULT_CONFIG_FILE


def load_config(path: Path | None = None) -> JobGuardConfig:
    """Load config from JSON file, falling back to defaults if file is missing.

    Raises ConfigError if the file exists but is unreadable or not a JSON object.

    Environment variables with JOBGUARD_ prefix override file values.
    Nested keys use __ as delimiter (e.g. JOBGUARD_CLEANUP__INTERVAL_SECONDS).
    """
    config_path = path or _DEFAULT_CONFIG_FILE
    config_path = config_path.expanduser().resolve()

    if config_path.exists():
        try:
            raw = json.loads(config_path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.error("Failed to read config {}: {}", config_path, exc)
            raise ConfigError(str(config_path), str(exc)) from exc
        if not isinstance(raw, dict):
            raise ConfigError(str(config_path), "top-level value must be a JSON object")
        return JobGuardConfig(**raw)

    return JobGuardConfig()


def save_config(config: JobGuardConfig, path: Path | None = None) -> Path:
    """Serialize current config to JSON and write to disk atomically.

    Uses temp-file-then-rename for crash safety.
    """
    config_path = path or _DEFAULT_CONFIG_FILE
    config_path = config_path.expanduser().resolve()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = config.model_dump(mode="json")

    tmp_path = config_path.with_suffix(".tmp")
    tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    tmp_path.rename(config_path)
    return config_path
