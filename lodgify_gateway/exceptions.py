"""Error taxonomy for calls made against the Lodgify API.

Every failure that leaves the request layer is an ``OperationError``. The
subclass (and its ``kind``) tells callers what happened; ``status`` mirrors
the HTTP status the failure corresponds to.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Discriminator for OperationError subclasses."""

    VALIDATION = "validation"
    RATE_LIMIT = "rate_limit"
    READ_ONLY = "read_only"
    HTTP = "http"
    UNKNOWN = "unknown"


class OperationError(Exception):
    """Base class for classified Lodgify API errors.

    Instances are built by ``ErrorClassifier`` and ``WriteGate``; the
    request layer never raises anything else for an API call.

    Attributes:
        message: Human readable message, prefixed ``Lodgify <status>:``
        status: HTTP status the error maps to
        path: Versioned API path the call was made against
        detail: Redacted JSON-compatible payload, if any
        retry_after_seconds: Server or limiter supplied wait hint
    """

    kind: ErrorKind = ErrorKind.UNKNOWN
    status_code: int = 500

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        path: str = "",
        detail: Any = None,
        retry_after_seconds: Optional[float] = None,
    ):
        self.message = message
        self.status = self.status_code if status is None else status
        self.path = path
        self.detail = detail
        self.retry_after_seconds = retry_after_seconds
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire shape consumed by the tool layer."""
        data: Dict[str, Any] = {
            "error": True,
            "message": self.message,
            "status": self.status,
            "path": self.path,
        }
        if self.detail is not None:
            data["detail"] = self.detail
        return data

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status}, path={self.path!r}, message={self.message!r})"


class ValidationError(OperationError):
    """Raised when a request is rejected before it is sent.

    Maps to HTTP 400 Bad Request.
    """

    kind = ErrorKind.VALIDATION
    status_code = 400


class RateLimitError(OperationError):
    """Raised when the request budget is exhausted, locally or upstream.

    Maps to HTTP 429 Too Many Requests.
    """

    kind = ErrorKind.RATE_LIMIT
    status_code = 429


class ReadOnlyModeError(OperationError):
    """Raised when a write is attempted while read-only mode is enabled.

    Maps to HTTP 403 Forbidden.
    """

    kind = ErrorKind.READ_ONLY
    status_code = 403


class HttpError(OperationError):
    """Raised for any non-429 error response from the API (404, 5xx, ...)."""

    kind = ErrorKind.HTTP


class UnknownError(OperationError):
    """Raised for transport failures and unrecognized error values.

    Maps to HTTP 500.
    """

    kind = ErrorKind.UNKNOWN
    status_code = 500
