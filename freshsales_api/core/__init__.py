"""Core utilities for the Freshsales client."""

from freshsales_api.core.config import Settings, settings
from freshsales_api.core.http_client import (
    build_default_headers,
    create_async_http_client,
    create_http_client,
)
from freshsales_api.core.logging import get_log_context, get_logger, setup_logging

__all__ = [
    "Settings",
    "settings",
    "build_default_headers",
    "create_http_client",
    "create_async_http_client",
    "get_logger",
    "get_log_context",
    "setup_logging",
]
