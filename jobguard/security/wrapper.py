"""Security wrapper for outgoing API requests.

Before a request leaves, RequestSecurityWrapper:
  1. Consults the rate-limit policy for the request's endpoint class and
     refuses to send when it is over budget
  2. Sanitizes top-level string fields of a JSON object body
  3. Attaches the session's anti-forgery token and informational headers

Responses are only observed: missing security headers or a nearly
exhausted server-side budget are logged, never acted upon.
"""

from __future__ import annotations

import json
from typing import Any

import httpx
from loguru import logger

from jobguard.config.schema import SecurityConfig
from jobguard.errors import RateLimitExceededError
from jobguard.logging import mask_key
from jobguard.ratelimit.policies import PolicyRegistry, default_registry
from jobguard.security.csrf import CSRFTokenProvider
from jobguard.security.headers import generate_security_headers
from jobguard.security.sanitizer import sanitize_form_data

_LOW_REMAINING_THRESHOLD = 5
_REQUEST_TIMEOUT = 30.0
# Recomputed by httpx from the rewritten body.
_BODY_HEADERS = ("content-length", "transfer-encoding")


class RequestSecurityWrapper:
    def __init__(
        self,
        registry: PolicyRegistry,
        csrf: CSRFTokenProvider | None = None,
        config: SecurityConfig | None = None,
    ) -> None:
        self._registry = registry
        self._csrf = csrf or CSRFTokenProvider()
        self._config = config or SecurityConfig()

    def process_request(self, request: httpx.Request, rate_limit_key: str | None = None) -> httpx.Request:
        """Return a secured copy of `request`.

        Raises RateLimitExceededError if the endpoint's policy denies the key.
        """
        key = rate_limit_key or self._config.rate_limit_key
        if self._config.enable_rate_limit:
            self._check_rate_limit(request.url.path, key)

        csrf_token = self._csrf.get_token() if self._config.enable_csrf else None
        headers = httpx.Headers(generate_security_headers(csrf_token=csrf_token, rate_limit_key=key))
        # Caller-supplied headers take precedence.
        headers.update(request.headers)

        try:
            body = request.content
        except httpx.RequestNotRead:
            return httpx.Request(
                request.method,
                request.url,
                headers=headers,
                stream=request.stream,
                extensions=request.extensions,
            )

        for name in _BODY_HEADERS:
            if name in headers:
                del headers[name]
        return httpx.Request(
            request.method,
            request.url,
            headers=headers,
            content=_sanitize_body(body) or None,
            extensions=request.extensions,
        )

    def process_response(self, response: httpx.Response) -> httpx.Response:
        """Log missing security headers. The response is returned unchanged."""
        if "content-security-policy" not in response.headers:
            logger.warning("Response from {} missing Content-Security-Policy header", response.url)

        remaining = response.headers.get("x-ratelimit-remaining")
        if remaining is not None:
            try:
                if int(remaining) < _LOW_REMAINING_THRESHOLD:
                    logger.warning("Approaching server rate limit ({} remaining)", remaining)
            except ValueError:
                logger.debug("Ignoring malformed X-RateLimit-Remaining: {!r}", remaining)

        return response

    async def send(
        self,
        request: httpx.Request,
        rate_limit_key: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> httpx.Response:
        """Secure and send `request`.

        Uses `client` when given; otherwise a short-lived client is opened
        for this one request. The caller owns any client it passes in.
        """
        secured = self.process_request(request, rate_limit_key)
        try:
            if client is not None:
                response = await client.send(secured)
            else:
                async with httpx.AsyncClient(timeout=_REQUEST_TIMEOUT) as owned:
                    response = await owned.send(secured)
        except httpx.HTTPError as exc:
            logger.error("Secure request {} {} failed: {}", secured.method, secured.url, exc)
            raise
        return self.process_response(response)

    def _check_rate_limit(self, path: str, key: str) -> None:
        policy = self._registry.for_endpoint(path)
        if policy is None:
            return
        decision = self._registry.check(policy, key)
        if not decision.allowed:
            logger.warning("Rate limit '{}' exceeded for key {}", policy, mask_key(key))
            raise RateLimitExceededError(policy, decision.retry_after)


def _sanitize_body(body: bytes) -> bytes:
    if not body:
        return body
    try:
        data = json.loads(body)
    except ValueError:
        return body
    if not isinstance(data, dict):
        return body
    return json.dumps(sanitize_form_data(data), ensure_ascii=False).encode("utf-8")


_session_csrf = CSRFTokenProvider()


async def secure_fetch(
    method: str,
    url: str,
    *,
    rate_limit_key: str | None = None,
    config: SecurityConfig | None = None,
    client: httpx.AsyncClient | None = None,
    **kwargs: Any,
) -> httpx.Response:
    """One-shot secured request using the default registry and session token.

    Extra keyword arguments (json=, params=, headers=, ...) are passed to
    httpx.Request.
    """
    if config is None:
        from jobguard.config.loader import load_config

        config = load_config().security
    wrapper = RequestSecurityWrapper(default_registry(), _session_csrf, config)
    return await wrapper.send(httpx.Request(method, url, **kwargs), rate_limit_key, client)
