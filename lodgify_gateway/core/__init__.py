"""Core utilities for the gateway: settings, logging and HTTP client setup."""

from lodgify_gateway.core.config import Settings, settings
from lodgify_gateway.core.http_client import create_http_client
from lodgify_gateway.core.logging import get_log_context, get_logger, setup_logging

__all__ = [
    "Settings",
    "settings",
    "create_http_client",
    "get_log_context",
    "get_logger",
    "setup_logging",
]
