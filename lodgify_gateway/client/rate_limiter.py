"""Fixed-window admission control for outbound Lodgify API calls.

One limiter is shared by every module bound to a ``RequestExecutor``, so the
budget is process-wide rather than per module.

This is a fixed window, not a sliding one: the counter resets at discrete
window boundaries, so a burst that straddles a boundary can see up to
``2 * limit`` admissions in a short span.
"""

import threading
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict

DEFAULT_LIMIT = 60
DEFAULT_WINDOW_SECONDS = 60.0


@dataclass(frozen=True)
class RateLimitStatus:
    """Snapshot of the limiter taken under a single rollover check."""

    allowed: bool
    remaining: int
    reset_time: float
    limit: int
    window_seconds: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class FixedWindowRateLimiter:
    """Counts admissions in fixed windows of ``window_seconds``.

    ``record_request`` never blocks: the count may pass ``limit``, but
    ``check_limit`` reports False from the moment ``count >= limit`` until
    the window rolls over.

    Usage:
        limiter = FixedWindowRateLimiter(limit=60, window_seconds=60.0)
        if limiter.check_limit():
            limiter.record_request()
            ...
    """

    def __init__(
        self,
        limit: int = DEFAULT_LIMIT,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the limiter.

        Args:
            limit: Admissions allowed per window
            window_seconds: Window length in seconds
            clock: Monotonic time source, injectable for tests
        """
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self._limit = limit
        self._window_seconds = window_seconds
        self._clock = clock
        self._count = 0
        self._window_start = clock()
        # check_limit + record_request is check-then-act; guard it for threads
        self._lock = threading.Lock()

    @property
    def limit(self) -> int:
        return self._limit

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    def _roll_window(self) -> None:
        """Start a new window if the current one has expired. Caller holds the lock."""
        now = self._clock()
        if now - self._window_start >= self._window_seconds:
            self._count = 0
            self._window_start = now

    def check_limit(self) -> bool:
        """Return True if another request fits in the current window."""
        with self._lock:
            self._roll_window()
            return self._count < self._limit

    def record_request(self) -> None:
        with self._lock:
            self._roll_window()
            self._count += 1

    def try_acquire(self) -> bool:
        """Check and record in one step; False (and nothing recorded) when full."""
        with self._lock:
            self._roll_window()
            if self._count >= self._limit:
                return False
            self._count += 1
            return True

    def get_remaining(self) -> int:
        with self._lock:
            self._roll_window()
            return max(0, self._limit - self._count)

    def get_reset_time(self) -> float:
        """Seconds until the current window ends, never negative."""
        with self._lock:
            self._roll_window()
            return self._reset_time()

    def _reset_time(self) -> float:
        window_end = self._window_start + self._window_seconds
        return max(0.0, window_end - self._clock())

    def reset(self) -> None:
        """Start a fresh window now with full capacity."""
        with self._lock:
            self._count = 0
            self._window_start = self._clock()

    def get_status(self) -> RateLimitStatus:
        with self._lock:
            self._roll_window()
            return RateLimitStatus(
                allowed=self._count < self._limit,
                remaining=max(0, self._limit - self._count),
                reset_time=self._reset_time(),
                limit=self._limit,
                window_seconds=self._window_seconds,
            )


def create_lodgify_rate_limiter() -> FixedWindowRateLimiter:
    """Create a limiter with Lodgify's published budget of 60 requests per minute."""
    return FixedWindowRateLimiter(limit=DEFAULT_LIMIT, window_seconds=DEFAULT_WINDOW_SECONDS)
