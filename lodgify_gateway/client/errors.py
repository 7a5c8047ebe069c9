"""Classification of raw failures into ``OperationError`` values.

``ErrorClassifier`` is the single place where HTTP error responses,
transport exceptions and arbitrary raised values become members of the
error taxonomy. Detail payloads are redacted on the way through.
"""

import json
import traceback
from typing import Any, Dict, Mapping, Optional

import httpx

from lodgify_gateway.client.sanitizer import sanitize
from lodgify_gateway.exceptions import (
    HttpError,
    OperationError,
    RateLimitError,
    ReadOnlyModeError,
    UnknownError,
    ValidationError,
)

DEFAULT_STATUS_MESSAGES: Dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized - Check your API key",
    403: "Forbidden",
    404: "Not Found",
    429: "Too Many Requests",
    500: "Internal Server Error",
    502: "Bad Gateway",
    503: "Service Unavailable",
}

READ_ONLY_SUGGESTION = (
    "Set LODGIFY_READ_ONLY=0 or remove the environment variable to enable write operations"
)


def parse_retry_after(value: Any) -> Optional[float]:
    """Parse a Retry-After value given in whole seconds.

    HTTP-date values and garbage are ignored.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if value >= 0 else None
    try:
        seconds = int(str(value).strip())
    except ValueError:
        return None
    return float(seconds) if seconds >= 0 else None


class ErrorClassifier:
    """Formats errors into the ``OperationError`` taxonomy.

    Args:
        include_stack_trace: Attach the traceback of unexpected exceptions to detail
        sanitize_detail: Redact credentials from detail payloads (default True)
        status_messages: Custom messages merged over the defaults
    """

    def __init__(
        self,
        include_stack_trace: bool = False,
        sanitize_detail: bool = True,
        status_messages: Optional[Mapping[int, str]] = None,
    ):
        self.include_stack_trace = include_stack_trace
        self.sanitize_detail = sanitize_detail
        self.status_messages = {**DEFAULT_STATUS_MESSAGES, **(status_messages or {})}

    def _sanitize(self, detail: Any) -> Any:
        return sanitize(detail) if self.sanitize_detail else detail

    def status_message(self, status: int, reason: str = "") -> str:
        message = self.status_messages.get(status)
        if message is None:
            message = f"HTTP {status} {reason}".rstrip()
        return f"Lodgify {status}: {message}"

    def format_http_error(self, response: httpx.Response, path: str) -> OperationError:
        """Format an HTTP error response.

        The body is parsed as JSON when possible; otherwise detail is absent.
        A 429 becomes a ``RateLimitError`` carrying the Retry-After hint.
        """
        detail: Any = None
        try:
            if response.content:
                detail = json.loads(response.content)
        except ValueError:
            detail = None

        retry_after = parse_retry_after(response.headers.get("retry-after"))
        return self._from_status(response.status_code, response.reason_phrase, path, detail, retry_after)

    def _from_status(
        self,
        status: int,
        reason: str,
        path: str,
        detail: Any,
        retry_after: Optional[float] = None,
    ) -> OperationError:
        message = self.status_message(status, reason)
        if status == 429:
            if retry_after is None and isinstance(detail, Mapping):
                retry_after = parse_retry_after(detail.get("retryAfter"))
            return RateLimitError(
                message,
                path=path,
                detail=self._sanitize(detail),
                retry_after_seconds=retry_after,
            )
        return HttpError(message, status=status, path=path, detail=self._sanitize(detail))

    def format_error(self, error: Any, path: str = "") -> OperationError:
        """Normalize any raised value into an ``OperationError``.

        Already classified errors pass through unchanged.
        """
        if isinstance(error, OperationError):
            return error

        if isinstance(error, httpx.HTTPStatusError):
            return self.format_http_error(error.response, path)

        if isinstance(error, Mapping) and isinstance(error.get("status"), int):
            return self._from_status(
                error["status"],
                str(error.get("statusText", "")),
                path,
                error.get("body"),
            )

        message = "An unexpected error occurred"
        detail: Any = None
        if isinstance(error, BaseException):
            message = str(error) or type(error).__name__
            if self.include_stack_trace:
                detail = {
                    "message": message,
                    "stack": "".join(
                        traceback.format_exception(type(error), error, error.__traceback__)
                    ),
                }
        elif isinstance(error, str):
            message = error
        else:
            detail = error

        return UnknownError(
            f"Lodgify 500: {message}",
            path=path,
            detail=self._sanitize(detail),
        )

    def create_rate_limit_error(self, path: str, retry_after: Optional[float] = None) -> RateLimitError:
        detail = {"retryAfter": retry_after} if retry_after is not None else None
        return RateLimitError(
            self.status_message(429),
            path=path,
            detail=detail,
            retry_after_seconds=retry_after,
        )

    def create_validation_error(self, path: str, message: str, detail: Any = None) -> ValidationError:
        return ValidationError(
            f"Lodgify 400: {message}",
            path=path,
            detail=self._sanitize(detail) if detail is not None else None,
        )

    def create_read_only_error(self, method: str, endpoint: str, operation: str) -> ReadOnlyModeError:
        """Build the error WriteGate raises for a blocked write."""
        method = method.upper()
        message = (
            f"Write operation '{operation}' is not allowed in read-only mode. "
            "Set LODGIFY_READ_ONLY=0 to enable write operations."
        )
        return ReadOnlyModeError(
            message,
            path=endpoint,
            detail={
                "operation": operation,
                "method": method,
                "endpoint": endpoint,
                "readOnlyMode": True,
                "suggestion": READ_ONLY_SUGGESTION,
            },
        )
