"""Per-call request orchestration against the Lodgify REST API.

Every call goes through the same pipeline:

    WriteGate -> rate limiter -> transport -> ErrorClassifier -> RetryPolicy

``RequestExecutor`` owns one instance of each stage. Domain modules receive
the executor in their constructor, so all of them share one rate budget and
one connection pool.
"""

import asyncio
import math
import re
import time
from typing import Any, Dict, Mapping, Optional

import httpx

from lodgify_gateway.client.errors import ErrorClassifier
from lodgify_gateway.client.rate_limiter import (
    FixedWindowRateLimiter,
    RateLimitStatus,
    create_lodgify_rate_limiter,
)
from lodgify_gateway.client.retry import RetryPolicy
from lodgify_gateway.client.sanitizer import sanitize
from lodgify_gateway.client.write_gate import WriteGate
from lodgify_gateway.core.config import API_VERSIONS, Settings
from lodgify_gateway.core.http_client import create_http_client
from lodgify_gateway.core.logging import get_log_context, get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.lodgify.com"

_VERSION_PREFIX = re.compile(r"^/?(v1|v2)/")


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def flatten_params(params: Mapping[str, Any], prefix: str = "") -> Dict[str, str]:
    """Flatten nested query parameters into bracket notation.

    Example:
        >>> flatten_params({"guest_breakdown": {"adults": 2}, "roomTypes": [{"Id": 7}]})
        {'guest_breakdown[adults]': '2', 'roomTypes[0][Id]': '7'}
    """
    flattened: Dict[str, str] = {}
    for key, value in params.items():
        new_key = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, Mapping):
            flattened.update(flatten_params(value, new_key))
        elif isinstance(value, (list, tuple)):
            for index, item in enumerate(value):
                if isinstance(item, Mapping):
                    flattened.update(flatten_params(item, f"{new_key}[{index}]"))
                elif item is not None:
                    flattened[f"{new_key}[{index}]"] = _stringify(item)
        else:
            flattened[new_key] = _stringify(value)
    return flattened


class RequestExecutor:
    """Executes Lodgify API calls with read-only gating, rate limiting and retries.

    Usage:
        async with RequestExecutor(api_key="...") as executor:
            properties = await executor.request("GET", "properties", params={"page": 1})
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        default_version: str = "v2",
        read_only: bool = False,
        rate_limiter: Optional[FixedWindowRateLimiter] = None,
        retry_policy: Optional[RetryPolicy] = None,
        classifier: Optional[ErrorClassifier] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        rate_limit_backoff: float = 1.0,
        debug_http: bool = False,
        config: Optional[Settings] = None,
    ):
        """Initialize the executor.

        Args:
            api_key: Lodgify API key, sent as ``X-ApiKey``
            base_url: API root URL
            default_version: API version used when a call does not pick one
            read_only: Block POST/PUT/PATCH/DELETE before they are sent
            rate_limiter: Shared limiter, 60 requests/minute when omitted
            retry_policy: Retry configuration, 5 attempts capped at 30s when omitted
            classifier: Error classifier
            http_client: Externally managed client; not closed by ``aclose``
            rate_limit_backoff: Seconds to wait once when the window is full
            debug_http: Log sanitized request/response metadata at DEBUG
            config: Settings for timeouts and pool limits of an internal client
        """
        if not api_key:
            raise ValueError("API key is required")
        if default_version not in API_VERSIONS:
            raise ValueError(f"default_version must be one of {API_VERSIONS}")

        self.base_url = base_url.rstrip("/")
        self.default_version = default_version
        self.rate_limiter = rate_limiter or create_lodgify_rate_limiter()
        self.retry_policy = retry_policy or RetryPolicy()
        self.classifier = classifier or ErrorClassifier()
        self.write_gate = WriteGate(read_only=read_only, classifier=self.classifier)
        self.rate_limit_backoff = rate_limit_backoff
        self.debug_http = debug_http
        self.headers = {
            "X-ApiKey": api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        self._owns_client = http_client is None
        self._http_client = http_client or create_http_client(self.base_url, config=config)

    @property
    def read_only(self) -> bool:
        return self.write_gate.read_only

    @property
    def http_client(self) -> httpx.AsyncClient:
        return self._http_client

    def build_path(self, path: str, version: Optional[str] = None) -> str:
        """Build a versioned API path, replacing any version prefix already present."""
        api_version = version or self.default_version
        if api_version not in API_VERSIONS:
            raise ValueError(f"api_version must be one of {API_VERSIONS}")
        clean_path = _VERSION_PREFIX.sub("", path).lstrip("/")
        return f"/{api_version}/{clean_path}"

    def rate_limit_status(self) -> RateLimitStatus:
        return self.rate_limiter.get_status()

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        api_version: Optional[str] = None,
        skip_rate_limit: bool = False,
        skip_retry: bool = False,
    ) -> Any:
        """Make an API call.

        Args:
            method: HTTP method
            path: Path relative to the version root; a ``v1/`` or ``v2/`` prefix is replaced
            headers: Extra headers merged over the defaults
            body: JSON-serializable request body
            params: Query parameters, nested values flattened to bracket notation
            api_version: ``v1`` or ``v2``, the executor default when None
            skip_rate_limit: Bypass admission control (health probes)
            skip_retry: Make a single attempt

        Returns:
            Parsed JSON, response text for non-JSON bodies, or None when empty

        Raises:
            OperationError: For blocked writes, exhausted budgets and error responses
        """
        method = method.upper()
        versioned_path = self.build_path(path, api_version)

        # Blocked writes leave no trace, not even in the rate window
        self.write_gate.check(method, versioned_path)

        if not skip_rate_limit and not self.rate_limiter.check_limit():
            logger.warning(
                "Rate limit exceeded, waiting before request",
                extra=get_log_context(method=method, path=versioned_path),
            )
            await asyncio.sleep(self.rate_limit_backoff)

        async def attempt() -> Any:
            if not skip_rate_limit and not self.rate_limiter.try_acquire():
                raise self.classifier.create_rate_limit_error(
                    versioned_path, math.ceil(self.rate_limiter.get_reset_time())
                )

            response = await self._send(method, versioned_path, headers, body, params)
            if response.status_code >= 400:
                raise self.classifier.format_http_error(response, versioned_path)
            return self._parse_body(response)

        if skip_retry:
            return await attempt()
        return await self.retry_policy.execute(attempt, label=f"{method} {versioned_path}")

    async def _send(
        self,
        method: str,
        path: str,
        headers: Optional[Mapping[str, str]],
        body: Any,
        params: Optional[Mapping[str, Any]],
    ) -> httpx.Response:
        request_headers = {**self.headers, **(headers or {})}
        query = flatten_params(params) if params else None

        if self.debug_http:
            logger.debug(
                f"HTTP Request: {method} {path}",
                extra={"detail": sanitize({"headers": request_headers, "body": body, "params": query})},
            )

        started = time.perf_counter()
        try:
            response = await self._http_client.request(
                method,
                f"{self.base_url}{path}",
                headers=request_headers,
                json=body,
                params=query,
            )
        except httpx.HTTPError as e:
            logger.warning(
                f"Transport error for {method} {path}: {type(e).__name__}: {e}",
                extra=get_log_context(method=method, path=path),
            )
            raise self.classifier.format_error(e, path) from e

        if self.debug_http:
            logger.debug(
                f"HTTP Response: {response.status_code} {response.reason_phrase}",
                extra=get_log_context(
                    method=method,
                    path=path,
                    status_code=response.status_code,
                    duration_ms=round((time.perf_counter() - started) * 1000, 1),
                ),
            )
        return response

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        if "application/json" in response.headers.get("content-type", ""):
            try:
                return response.json()
            except ValueError:
                return response.text
        return response.text

    async def aclose(self) -> None:
        """Close the HTTP client if this executor created it."""
        if self._owns_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> "RequestExecutor":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def create_executor(
    config: Settings,
    http_client: Optional[httpx.AsyncClient] = None,
    api_key: Optional[str] = None,
) -> RequestExecutor:
    """Build an executor whose limiter, retry policy and classifier follow ``config``."""
    return RequestExecutor(
        api_key=api_key if api_key is not None else config.lodgify_api_key,
        base_url=config.lodgify_base_url,
        default_version=config.lodgify_default_api_version,
        read_only=config.lodgify_read_only,
        rate_limiter=FixedWindowRateLimiter(
            limit=config.rate_limit_requests,
            window_seconds=config.rate_limit_window_seconds,
        ),
        retry_policy=RetryPolicy(
            max_retries=config.retry_max_attempts,
            base_delay=config.retry_base_delay,
            max_delay=config.retry_max_delay,
        ),
        classifier=ErrorClassifier(
            include_stack_trace=config.error_include_stack_trace,
            sanitize_detail=config.error_sanitize_detail,
        ),
        http_client=http_client,
        rate_limit_backoff=config.rate_limit_backoff_seconds,
        debug_http=config.debug_http,
        config=config,
    )
