"""Input sanitization and outbound URL checks.

Strips the most common script-injection fragments from user-entered
strings before they are sent anywhere. This is defence in depth only:
rendered output must still be escaped where it is displayed.
"""

from __future__ import annotations

import ipaddress
import re
from typing import Any
from urllib.parse import urlsplit

# Each pattern: (name, compiled regex), applied in order
INJECTION_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("angle brackets", re.compile(r"[<>]")),
    ("javascript: URI", re.compile(r"javascript:", re.IGNORECASE)),
    ("inline event handler", re.compile(r"on\w+=", re.IGNORECASE)),
]

_ALLOWED_URL_SCHEMES = {"http", "https"}


def sanitize_input(text: str) -> str:
    """Remove injection fragments from a single string and trim it."""
    for _name, pattern in INJECTION_PATTERNS:
        text = pattern.sub("", text)
    return text.strip()


def sanitize_form_data(data: dict[str, Any]) -> dict[str, Any]:
    """Return a shallow copy of `data` with top-level strings sanitized.

    Nested structures, numbers and file handles pass through untouched.
    """
    return {
        key: sanitize_input(value) if isinstance(value, str) else value
        for key, value in data.items()
    }


def validate_url(url: str) -> bool:
    """Check that `url` is safe to fetch from the application.

    Only http(s) URLs are accepted, and hosts that are IP literals in
    private, loopback or link-local ranges are rejected.
    """
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError:
        return False

    if parts.scheme not in _ALLOWED_URL_SCHEMES or not hostname:
        return False

    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        return hostname != "localhost"

    return not (address.is_private or address.is_loopback or address.is_link_local)
