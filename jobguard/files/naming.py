"""Storage-safe filenames for accepted uploads."""

from __future__ import annotations

import re
import secrets
import time

from jobguard.files.validator import file_extension

_MAX_NAME_LENGTH = 255
_DISALLOWED_CHARS = re.compile(r"[^a-zA-Z0-9.-]")
_DOT_RUNS = re.compile(r"\.+")


def sanitize_file_name(name: str) -> str:
    """Make a user-supplied filename safe to use as a path component.

    Anything outside [A-Za-z0-9.-] becomes "_", runs of dots collapse to
    one, and a leading dot is dropped so the result is never hidden or
    relative.
    """
    cleaned = _DISALLOWED_CHARS.sub("_", name)
    cleaned = _DOT_RUNS.sub(".", cleaned)
    cleaned = cleaned.removeprefix(".")
    return cleaned[:_MAX_NAME_LENGTH]


def generate_secure_file_name(original_name: str) -> str:
    """Collision-resistant name that keeps the original extension.

    Format: <unix-ms>_<random>[.<ext>]
    """
    extension = sanitize_file_name(file_extension(original_name))
    timestamp = int(time.time() * 1000)
    token = secrets.token_hex(8)
    return f"{timestamp}_{token}.{extension}" if extension else f"{timestamp}_{token}"
