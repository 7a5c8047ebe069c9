"""Redaction of credentials from error details and log payloads."""

import re
from typing import Any, Mapping

REDACTED = "[REDACTED]"

SENSITIVE_KEY_PATTERNS = (
    "key",
    "password",
    "token",
    "secret",
    "auth",
    "credential",
    "apikey",
    "api_key",
)

# Long opaque strings look like API keys
_API_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")
_API_KEY_MIN_LENGTH = 21
_JWT_PREFIX = "eyJ"


def is_sensitive_key(key: Any) -> bool:
    """Check if a key name suggests sensitive data."""
    lower_key = str(key).lower()
    return any(pattern in lower_key for pattern in SENSITIVE_KEY_PATTERNS)


def is_sensitive_value(value: str) -> bool:
    """Check if a string value looks like an API key or a JWT."""
    if len(value) >= _API_KEY_MIN_LENGTH and _API_KEY_PATTERN.match(value):
        return True
    return value.startswith(_JWT_PREFIX)


def sanitize(data: Any) -> Any:
    """Return a copy of ``data`` with sensitive keys and values redacted.

    Mappings are walked key by key and lists/tuples element-wise. A value
    under a sensitive key is replaced whatever its type. The input is never
    mutated, and sanitizing an already sanitized payload is a no-op.

    Example:
        >>> sanitize({"password": "x", "nested": {"ok": "z"}})
        {'password': '[REDACTED]', 'nested': {'ok': 'z'}}
    """
    if isinstance(data, Mapping):
        return {
            key: REDACTED if is_sensitive_key(key) else sanitize(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [sanitize(item) for item in data]
    if isinstance(data, str) and is_sensitive_value(data):
        return REDACTED
    return data
