"""Security modules: input sanitization, anti-forgery tokens, request wrapping."""

from jobguard.security.csrf import CSRFTokenProvider, FileSessionStorage, InMemorySessionStorage
from jobguard.security.sanitizer import sanitize_form_data, sanitize_input, validate_url
from jobguard.security.wrapper import RequestSecurityWrapper, secure_fetch

__all__ = [
    "CSRFTokenProvider",
    "FileSessionStorage",
    "InMemorySessionStorage",
    "RequestSecurityWrapper",
    "sanitize_form_data",
    "sanitize_input",
    "secure_fetch",
    "validate_url",
]
