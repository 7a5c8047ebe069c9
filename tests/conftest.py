"""Shared fixtures for the gateway test suite."""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from lodgify_gateway.client.errors import ErrorClassifier
from lodgify_gateway.client.executor import RequestExecutor
from lodgify_gateway.client.rate_limiter import FixedWindowRateLimiter
from lodgify_gateway.client.retry import RetryPolicy

BASE_URL = "https://api.lodgify.test"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sleep():
    """Stand-in for asyncio.sleep that records requested delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def limiter(clock):
    return FixedWindowRateLimiter(limit=60, window_seconds=60.0, clock=clock)


@pytest.fixture
def classifier():
    return ErrorClassifier()


@pytest_asyncio.fixture
async def make_executor(limiter, sleep):
    """Factory for executors against BASE_URL with instant retries."""
    created = []

    def factory(**kwargs):
        options = {
            "api_key": "test-api-key",
            "base_url": BASE_URL,
            "rate_limiter": limiter,
            "retry_policy": RetryPolicy(sleep=sleep),
            "rate_limit_backoff": 0,
        }
        options.update(kwargs)
        executor = RequestExecutor(**options)
        created.append(executor)
        return executor

    yield factory

    for executor in created:
        await executor.aclose()


@pytest_asyncio.fixture
async def executor(make_executor):
    return make_executor()
