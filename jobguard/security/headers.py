"""Outbound request headers and the application's Content-Security-Policy."""

from __future__ import annotations

CSP_CONFIG: dict[str, list[str]] = {
    "default-src": ["'self'"],
    "script-src": ["'self'", "'unsafe-inline'", "https://www.google.com", "https://www.gstatic.com"],
    "style-src": ["'self'", "'unsafe-inline'", "https://fonts.googleapis.com"],
    "font-src": ["'self'", "https://fonts.gstatic.com"],
    "img-src": ["'self'", "data:", "https:"],
    "connect-src": ["'self'"],
    "frame-src": ["https://www.google.com"],
    "object-src": ["'none'"],
    "base-uri": ["'self'"],
    "form-action": ["'self'"],
    "frame-ancestors": ["'none'"],
    "upgrade-insecure-requests": [],
}


def generate_csp_header(config: dict[str, list[str]] | None = None) -> str:
    """Render a CSP directive map; directives without sources are emitted bare."""
    directives = CSP_CONFIG if config is None else config
    return "; ".join(
        f"{directive} {' '.join(sources)}" if sources else directive
        for directive, sources in directives.items()
    )


def generate_security_headers(
    csrf_token: str | None = None,
    rate_limit_key: str | None = None,
) -> dict[str, str]:
    headers = {"X-Requested-With": "XMLHttpRequest"}
    if csrf_token:
        headers["X-CSRF-Token"] = csrf_token
    if rate_limit_key:
        headers["X-Rate-Limit-Key"] = rate_limit_key
    headers["Content-Security-Policy"] = generate_csp_header()
    return headers
