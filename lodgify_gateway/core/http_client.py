"""HTTP client construction for the Lodgify API.

One ``httpx.AsyncClient`` is created per executor and shared by every API
module registered on it, so connections are pooled across modules.
"""

from typing import Any, Optional

import httpx

from lodgify_gateway.core.config import Settings, settings as default_settings


def build_timeout(config: Settings, timeout: Optional[float] = None) -> httpx.Timeout:
    """Build granular timeouts from settings.

    A single ``timeout`` value overrides every phase.
    """
    if timeout is not None:
        return httpx.Timeout(timeout)
    return httpx.Timeout(
        connect=config.httpx_connect_timeout,
        read=config.httpx_read_timeout,
        write=config.httpx_write_timeout,
        pool=config.httpx_pool_timeout,
    )


def build_limits(config: Settings) -> httpx.Limits:
    return httpx.Limits(
        max_connections=config.httpx_max_connections,
        max_keepalive_connections=config.httpx_max_keepalive_connections,
        keepalive_expiry=config.httpx_keepalive_expiry,
    )


def create_http_client(
    base_url: str,
    headers: Optional[dict] = None,
    config: Optional[Settings] = None,
    **kwargs: Any,
) -> httpx.AsyncClient:
    """Create a new HTTP client for the Lodgify API.

    The returned client should be closed when done:
        async with create_http_client(base_url) as client:
            ...

    Args:
        base_url: API root, e.g. ``https://api.lodgify.com``
        headers: Default headers sent with every request
        config: Settings to read timeouts and pool limits from
        **kwargs: ``timeout`` overrides all granular timeouts; anything else
            is passed to ``httpx.AsyncClient`` unchanged

    Returns:
        A new httpx.AsyncClient instance.
    """
    config = config or default_settings
    timeout = build_timeout(config, kwargs.pop("timeout", None))
    return httpx.AsyncClient(
        base_url=base_url.rstrip("/"),
        headers=headers or {},
        timeout=timeout,
        limits=build_limits(config),
        **kwargs,
    )
