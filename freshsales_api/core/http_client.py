"""HTTP client construction for the Freshsales API.

httpx is the transport: ``httpx.Client`` serves synchronous calls and
``httpx.AsyncClient`` asynchronous ones. Both are built with the same
headers, timeouts and pool limits.
"""

from typing import Any, Dict, Optional

import httpx

from freshsales_api.core.config import Settings, settings as default_settings
from freshsales_api.core.logging import get_logger

logger = get_logger(__name__)


def build_default_headers(apikey: str) -> Dict[str, str]:
    """Build the headers sent with every API request.

    Args:
        apikey: The Freshsales API token

    Returns:
        Dictionary of HTTP headers
    """
    return {
        "Authorization": f"Token token={apikey}",
        "Accept": "application/json",
        "Content-Type": "application/json",
    }


def _client_config(
    apikey: Optional[str], config: Settings, options: Dict[str, Any]
) -> Dict[str, Any]:
    """Merge caller options over the settings-derived client configuration."""
    options = dict(options)

    # A single timeout value overrides the granular ones
    timeout_override = options.pop("timeout", None)
    if timeout_override is not None:
        timeout = (
            timeout_override
            if isinstance(timeout_override, httpx.Timeout)
            else httpx.Timeout(timeout_override)
        )
    else:
        timeout = httpx.Timeout(
            connect=options.pop("connect_timeout", config.httpx_connect_timeout),
            read=options.pop("read_timeout", config.httpx_read_timeout),
            write=options.pop("write_timeout", config.httpx_write_timeout),
            pool=options.pop("pool_timeout", config.httpx_pool_timeout),
        )

    pool = {
        "max_connections": options.pop(
            "max_connections", config.httpx_max_connections
        ),
        "max_keepalive_connections": options.pop(
            "max_keepalive_connections", config.httpx_max_keepalive_connections
        ),
        "keepalive_expiry": options.pop(
            "keepalive_expiry", config.httpx_keepalive_expiry
        ),
    }
    limits = options.pop("limits", None) or httpx.Limits(**pool)

    headers = build_default_headers(config.apikey if apikey is None else apikey)
    headers.update(options.pop("headers", None) or {})

    return {"timeout": timeout, "limits": limits, "headers": headers, **options}


def create_http_client(
    apikey: Optional[str] = None,
    config: Optional[Settings] = None,
    **options,
) -> httpx.Client:
    """Create a synchronous HTTP client with default settings.

    Args:
        apikey: API token; defaults to ``FRESHSALES_APIKEY``
        config: Settings to read defaults from
        **options: Overrides. ``timeout``, ``connect_timeout``, ``read_timeout``,
            ``write_timeout``, ``pool_timeout``, ``max_connections``,
            ``max_keepalive_connections``, ``keepalive_expiry`` and ``headers``
            are merged with the defaults; anything else goes to httpx as is.

    Returns:
        A new httpx.Client. The caller owns it and should close it.
    """
    client_config = _client_config(apikey, config or default_settings, options)
    logger.debug(
        "Creating HTTP client | Max connections: %s",
        client_config["limits"].max_connections,
    )
    return httpx.Client(**client_config)


def create_async_http_client(
    apikey: Optional[str] = None,
    config: Optional[Settings] = None,
    **options,
) -> httpx.AsyncClient:
    """Create an asynchronous HTTP client with default settings.

    Accepts the same arguments as :func:`create_http_client`.
    """
    client_config = _client_config(apikey, config or default_settings, options)
    logger.debug(
        "Creating async HTTP client | Max connections: %s",
        client_config["limits"].max_connections,
    )
    return httpx.AsyncClient(**client_config)
