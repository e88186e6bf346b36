"""Freshsales REST API client.

Dispatches requests through httpx, synchronously or as an asyncio task,
with optional client-side rate limiting. Every call produces a
``CallResult``; only configuration and quota lookup problems raise.

Example:
    >>> client = FreshsalesClient(domain="acme.myfreshworks.com", apikey="...")
    >>> client.enable_rate_limiting()
    >>> result = client.rest("GET", "/crm/sales/api/contacts/1")
    >>> if not result.is_error:
    ...     print(result.body_raw["contact"]["email"])
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

import httpx

from freshsales_api.core.config import Settings, settings as default_settings
from freshsales_api.core.http_client import (
    create_async_http_client,
    create_http_client,
)
from freshsales_api.core.logging import get_log_context
from freshsales_api.exceptions import ConfigurationError
from freshsales_api.models import CallResult
from freshsales_api.services.normalizer import normalize_error, normalize_success
from freshsales_api.services.quota import QuotaTracker
from freshsales_api.services.rate_limit import RateLimitConfig, RateLimiter

# Prefix of every log message, for filtering
LOG_KEY = "[FreshsalesAPI]"

# Methods whose params are sent as a query string instead of a JSON body
QUERY_METHODS = frozenset(("GET", "HEAD"))

REST_FAMILY = "rest"


@dataclass
class _PreparedCall:
    method: str
    uri: httpx.URL
    timestamps: Tuple[Optional[float], Optional[float]]
    options: Dict[str, Any] = field(default_factory=dict)
    started_at: float = field(default_factory=time.monotonic)

    @property
    def tag(self) -> str:
        return f"[{self.uri}:{self.method}]"

    @property
    def duration_ms(self) -> float:
        return round((time.monotonic() - self.started_at) * 1000, 3)


class FreshsalesClient:
    """Client for the Freshsales REST API.

    The client owns its quota counters and rate limiter; a single instance
    may be shared between threads. HTTP clients passed in are used as is
    and never closed by this class; clients it creates itself are closed
    by :meth:`close` / :meth:`aclose`.
    """

    def __init__(
        self,
        domain: Optional[str] = None,
        apikey: Optional[str] = None,
        *,
        http_client: Optional[httpx.Client] = None,
        async_http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[logging.Logger] = None,
        settings: Optional[Settings] = None,
        **client_options,
    ):
        """Initialize the client.

        Args:
            domain: CRM host; falls back to ``FRESHSALES_DOMAIN`` at call time
            apikey: API token; falls back to ``FRESHSALES_APIKEY``
            http_client: Synchronous transport to use instead of a default one
            async_http_client: Asynchronous transport to use instead of a default one
            logger: Logger for diagnostics; logging is off when None
            settings: Settings to use instead of the environment-loaded ones
            **client_options: Extra options merged into default httpx clients
        """
        self.settings = settings or default_settings
        self.domain = domain
        self.apikey = apikey
        self.logger = logger
        self._client_options = client_options

        self._http_client = http_client
        self._async_http_client = async_http_client
        self._owns_http_client = False
        self._owns_async_http_client = False

        self.quota = QuotaTracker(
            default_limit=self.settings.quota_default_limit,
            families=(REST_FAMILY,),
        )
        self.rate_limiter = RateLimiter(
            RateLimitConfig(
                enabled=self.settings.rate_limit_enabled,
                cycle_ms=self.settings.rate_limit_cycle_ms,
                buffer_ms=self.settings.rate_limit_buffer_ms,
            )
        )

    # -- transport ---------------------------------------------------------

    @property
    def http_client(self) -> httpx.Client:
        """The synchronous HTTP client, created on first use."""
        if self._http_client is None:
            self._http_client = create_http_client(
                self.apikey, self.settings, **self._client_options
            )
            self._owns_http_client = True
        return self._http_client

    @property
    def async_http_client(self) -> httpx.AsyncClient:
        """The asynchronous HTTP client, created on first use."""
        if self._async_http_client is None:
            self._async_http_client = create_async_http_client(
                self.apikey, self.settings, **self._client_options
            )
            self._owns_async_http_client = True
        return self._async_http_client

    def set_client(self, client: httpx.Client) -> "FreshsalesClient":
        """Replace the synchronous HTTP client."""
        self._http_client = client
        self._owns_http_client = False
        return self

    def set_async_client(self, client: httpx.AsyncClient) -> "FreshsalesClient":
        """Replace the asynchronous HTTP client."""
        self._async_http_client = client
        self._owns_async_http_client = False
        return self

    def close(self) -> None:
        if self._owns_http_client and self._http_client is not None:
            self._http_client.close()
            self._http_client = None
            self._owns_http_client = False

    async def aclose(self) -> None:
        self.close()
        if self._owns_async_http_client and self._async_http_client is not None:
            await self._async_http_client.aclose()
            self._async_http_client = None
            self._owns_async_http_client = False

    def __enter__(self) -> "FreshsalesClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    async def __aenter__(self) -> "FreshsalesClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # -- rate limiting and quota -------------------------------------------

    def enable_rate_limiting(
        self, cycle: Optional[int] = None, buffer: Optional[int] = None
    ) -> "FreshsalesClient":
        """Enable rate limiting.

        Args:
            cycle: Minimum spacing between calls in ms (default 500)
            buffer: Extra wait added to every computed delay in ms (default 100)
        """
        self.rate_limiter.enable(cycle, buffer)
        return self

    def disable_rate_limiting(self) -> "FreshsalesClient":
        self.rate_limiter.disable()
        return self

    def is_rate_limiting_enabled(self) -> bool:
        return self.rate_limiter.is_enabled()

    def get_api_calls(
        self, family: str = REST_FAMILY, key: Optional[str] = None
    ) -> Union[Dict[str, int], int]:
        """Return the call counters from the last response headers.

        Args:
            family: Counter family, only "rest" is tracked by default
            key: One of "left", "made", "limit"; all of them when None

        Raises:
            InvalidQuotaKeyError: For an unknown family or key (a LookupError)
        """
        return self.quota.get(family, key)

    # -- logging -----------------------------------------------------------

    def set_logger(self, logger: Optional[logging.Logger]) -> "FreshsalesClient":
        self.logger = logger
        return self

    def log(self, msg: str, level: Union[int, str] = logging.DEBUG, **context) -> bool:
        """Log a message with the client prefix.

        Returns:
            False when no logger is set
        """
        if self.logger is None:
            return False
        if isinstance(level, str):
            level = logging.getLevelName(level.upper())
        self.logger.log(level, f"{LOG_KEY} {msg}", extra=get_log_context(**context))
        return True

    # -- dispatch ----------------------------------------------------------

    def get_base_uri(self) -> httpx.URL:
        """Build the base URI from the configured domain.

        Raises:
            ConfigurationError: When no domain is configured
        """
        domain = self.domain or self.settings.domain
        if not domain:
            raise ConfigurationError()
        return httpx.URL(f"{self.settings.scheme}://{domain}")

    def build_uri(self, path: str) -> httpx.URL:
        """Join an API path to the base URI.

        The path is always taken as a path on the configured domain, so
        "//other.host/x" or "https://other.host/x" cannot change the host.

        Raises:
            ConfigurationError: When no domain is configured
        """
        return self.get_base_uri().join("/" + path.lstrip("/"))

    def rest(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        sync: bool = True,
    ) -> Union[CallResult, "asyncio.Task[CallResult]"]:
        """Run a request against the Freshsales API.

        The rate limiter gate runs first and may block the calling thread,
        in both modes.

        Args:
            method: HTTP verb, case-insensitive
            path: API path, e.g. "/crm/sales/api/leads/1"
            params: Query parameters for GET/HEAD, JSON body otherwise
            headers: Headers merged over the client defaults
            sync: When False, return an asyncio task instead of waiting;
                requires a running event loop

        Returns:
            A CallResult, or a task resolving to one

        Raises:
            ConfigurationError: When no domain is configured
        """
        loop = None if sync else asyncio.get_running_loop()
        call = self._prepare(method, path, params, headers)
        if loop is None:
            return self._send(call)
        return loop.create_task(self._send_async(call))

    async def arest(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> CallResult:
        """Await an asynchronous request; see :meth:`rest`."""
        return await self.rest(method, path, params, headers, sync=False)

    def _prepare(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]],
        headers: Optional[Dict[str, str]],
    ) -> _PreparedCall:
        timestamps = self.rate_limiter.acquire(
            on_limit_hit=lambda wait_ms: self.log(
                f"Rest rate limit hit, waiting {wait_ms:.0f}ms", family=REST_FAMILY
            )
        )

        method = method.upper()
        call = _PreparedCall(
            method=method,
            uri=self.build_uri(path),
            timestamps=timestamps,
        )

        if params is not None:
            call.options["params" if method in QUERY_METHODS else "json"] = params
        self.log(
            f"{call.tag} Request Params: {json.dumps(params, default=str)}",
            method=method,
            uri=str(call.uri),
        )

        if headers:
            call.options["headers"] = headers
            self.log(
                f"{call.tag} Request Headers: {json.dumps(headers)}",
                method=method,
                uri=str(call.uri),
            )
        return call

    def _send(self, call: _PreparedCall) -> CallResult:
        try:
            response = self.http_client.request(call.method, call.uri, **call.options)
            if response.is_error:
                response.raise_for_status()
        except httpx.HTTPError as exc:
            return self._on_error(call, exc)
        return self._on_success(call, response)

    async def _send_async(self, call: _PreparedCall) -> CallResult:
        try:
            response = await self.async_http_client.request(
                call.method, call.uri, **call.options
            )
            if response.is_error:
                response.raise_for_status()
        except httpx.HTTPError as exc:
            return self._on_error(call, exc)
        return self._on_success(call, response)

    def _on_success(self, call: _PreparedCall, response: httpx.Response) -> CallResult:
        result = normalize_success(response, call.timestamps)
        self.quota.update(response, REST_FAMILY)
        self.log(
            f"{call.tag} {response.status_code}: {response.text}",
            method=call.method,
            uri=str(call.uri),
            status_code=response.status_code,
            duration_ms=call.duration_ms,
        )
        return result

    def _on_error(self, call: _PreparedCall, exc: httpx.HTTPError) -> CallResult:
        result = normalize_error(exc, call.timestamps)
        if result.response is not None:
            self.quota.update(result.response, REST_FAMILY)
            self.log(
                f"{call.tag} {result.status} Error: {result.response.text}",
                logging.WARNING,
                method=call.method,
                uri=str(call.uri),
                status_code=result.status,
                duration_ms=call.duration_ms,
            )
        else:
            self.log(
                f"{call.tag} Unknown Error: {exc}",
                logging.WARNING,
                method=call.method,
                uri=str(call.uri),
                duration_ms=call.duration_ms,
            )
        return result
