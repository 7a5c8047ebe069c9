"""Request layer for the Lodgify API.

This package provides:
- Fixed-window admission control (FixedWindowRateLimiter)
- Retry with exponential backoff (RetryPolicy)
- Error classification and redaction (ErrorClassifier, sanitize)
- Read-only gating (WriteGate)
- The per-call pipeline tying them together (RequestExecutor)
"""

from lodgify_gateway.client.errors import ErrorClassifier
from lodgify_gateway.client.executor import RequestExecutor, create_executor, flatten_params
from lodgify_gateway.client.rate_limiter import (
    FixedWindowRateLimiter,
    RateLimitStatus,
    create_lodgify_rate_limiter,
)
from lodgify_gateway.client.retry import RetryPolicy, default_should_retry
from lodgify_gateway.client.sanitizer import REDACTED, sanitize
from lodgify_gateway.client.write_gate import WRITE_METHODS, WriteGate

__all__ = [
    # Errors
    "ErrorClassifier",
    "REDACTED",
    "sanitize",
    # Executor
    "RequestExecutor",
    "create_executor",
    "flatten_params",
    # Rate limiting
    "FixedWindowRateLimiter",
    "RateLimitStatus",
    "create_lodgify_rate_limiter",
    # Retry
    "RetryPolicy",
    "default_should_retry",
    # Read-only
    "WRITE_METHODS",
    "WriteGate",
]
