"""Retry mechanism with exponential backoff for Lodgify API calls.

This module provides a configurable retry policy that retries classified
``OperationError`` failures (429 and 5xx by default), honoring a
server-declared retry-after hint when the error carries one.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, TypeVar

from lodgify_gateway.core.logging import get_logger
from lodgify_gateway.exceptions import OperationError

logger = get_logger(__name__)

T = TypeVar("T")


def default_should_retry(status: int) -> bool:
    """Retry on rate limiting and on server errors (5xx)."""
    return status == 429 or 500 <= status < 600


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration and executor for retries with exponential backoff.

    Attributes:
        max_retries: Total number of attempts, including the first (default: 5)
        base_delay: Delay before the first retry in seconds (default: 1.0)
        max_delay: Upper bound for any single delay in seconds (default: 30.0)
        exponential_base: Base for exponential calculation (default: 2.0)
        should_retry: Predicate over the error status
        sleep: Awaitable sleep, ``asyncio.sleep`` when None

    Example:
        >>> policy = RetryPolicy(max_retries=5, base_delay=1.0)
        >>> policy.calculate_delay(attempt=2)
        4.0
    """

    max_retries: int = 5
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0
    should_retry: Callable[[int], bool] = default_should_retry
    sleep: Optional[Callable[[float], Awaitable[Any]]] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")

    def calculate_delay(self, attempt: int, retry_after: Optional[float] = None) -> float:
        """Calculate the delay before the next attempt.

        A server supplied ``retry_after`` wins over the exponential formula;
        both are capped at ``max_delay``.

        Args:
            attempt: The failed attempt number (0-indexed)
            retry_after: Wait hint in seconds carried by the error

        Returns:
            Delay in seconds
        """
        if retry_after is not None and retry_after >= 0:
            return min(float(retry_after), self.max_delay)
        delay = self.base_delay * (self.exponential_base**attempt)
        return min(delay, self.max_delay)

    def is_retryable(self, error: BaseException) -> bool:
        """Only classified errors whose status passes ``should_retry`` are retried."""
        return isinstance(error, OperationError) and self.should_retry(error.status)

    async def execute(self, fn: Callable[[], Awaitable[T]], label: str = "request") -> T:
        """Await ``fn`` until it succeeds or the policy gives up.

        Args:
            fn: Zero-argument coroutine function performing one attempt
            label: Name used in log messages

        Returns:
            The first successful result

        Raises:
            The last error raised by ``fn`` once it is not retryable or
            attempts are exhausted.
        """
        sleep = self.sleep or asyncio.sleep

        for attempt in range(self.max_retries):
            try:
                return await fn()
            except Exception as e:
                if not self.is_retryable(e):
                    logger.debug(f"Non-retryable error in {label}: {type(e).__name__}: {e}")
                    raise

                if attempt + 1 >= self.max_retries:
                    logger.warning(
                        f"Max retries ({self.max_retries}) exceeded for {label}: "
                        f"{type(e).__name__}: {e}",
                        extra={"attempt": attempt + 1},
                    )
                    raise

                delay = self.calculate_delay(attempt, e.retry_after_seconds)
                logger.warning(
                    f"Retry {attempt + 1}/{self.max_retries} for {label} "
                    f"after {type(e).__name__}: {e}. Waiting {delay:.2f}s...",
                    extra={"attempt": attempt + 1},
                )
                await sleep(delay)

        # max_retries >= 1 guarantees the loop returned or raised
        raise RuntimeError("retry loop exited without a result")
