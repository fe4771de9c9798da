"""Session-scoped anti-forgery tokens.

A token is created on first use and kept in session storage so every
state-changing request from the same session carries the same value.
InMemorySessionStorage lives as long as the process; FileSessionStorage
keeps the session on disk for hosts that run one process per session
(a desktop shell, a CLI).

FileSessionStorage uses atomic writes (temp file + rename) and sets
0o600 permissions, following jobguard.config.loader.save_config().
"""

from __future__ import annotations

import contextlib
import json
import os
import secrets
from pathlib import Path
from typing import Protocol

from loguru import logger

CSRF_STORAGE_KEY = "csrf-token"


class SessionStorage(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class InMemorySessionStorage:
    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class FileSessionStorage:
    """JSON-file session storage with restrictive permissions."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or Path("~/.jobguard/session.json").expanduser()

    def get(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Failed to read session storage {}: {}", self._path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        with contextlib.suppress(OSError):
            os.chmod(tmp_path, 0o600)
        tmp_path.rename(self._path)


class CSRFTokenProvider:
    """Hands out the session's anti-forgery token, creating it if needed."""

    def __init__(self, storage: SessionStorage | None = None) -> None:
        self._storage = storage if storage is not None else InMemorySessionStorage()

    def get_token(self) -> str:
        token = self._storage.get(CSRF_STORAGE_KEY)
        if not token:
            token = self._new_token()
        return token

    def rotate(self) -> str:
        """Replace the session's token, e.g. after login."""
        return self._new_token()

    def _new_token(self) -> str:
        token = secrets.token_urlsafe(24)
        self._storage.set(CSRF_STORAGE_KEY, token)
        logger.debug("Issued new anti-forgery token")
        return token
