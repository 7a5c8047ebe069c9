"""Read-only gating of mutating API calls."""

from typing import Iterable, Mapping, Optional

from lodgify_gateway.client.errors import ErrorClassifier

WRITE_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


def is_write_method(method: str) -> bool:
    return method.upper() in WRITE_METHODS


class WriteGate:
    """Rejects write verbs when the client is configured read-only.

    The check is pure: a blocked call leaves no trace in the rate limiter
    and never reaches the network.
    """

    def __init__(self, read_only: bool = False, classifier: Optional[ErrorClassifier] = None):
        self.read_only = read_only
        self._classifier = classifier or ErrorClassifier()

    def check(self, method: str, endpoint: str, operation: Optional[str] = None) -> None:
        """Raise ``ReadOnlyModeError`` if ``method`` would mutate state.

        Args:
            method: HTTP method
            endpoint: Versioned path the call targets
            operation: Description used in the message, ``"<METHOD> <endpoint>"`` by default
        """
        if not self.read_only or not is_write_method(method):
            return
        method = method.upper()
        raise self._classifier.create_read_only_error(
            method, endpoint, operation or f"{method} {endpoint}"
        )

    def check_batch(self, operations: Iterable[Mapping]) -> None:
        """Reject a whole batch up front if any of its operations writes."""
        if not self.read_only:
            return
        writes = [op for op in operations if is_write_method(str(op.get("method", "")))]
        if writes:
            first = writes[0]
            raise self._classifier.create_read_only_error(
                str(first["method"]),
                str(first.get("path", "")),
                f"Batch operation containing {len(writes)} write operations",
            )
