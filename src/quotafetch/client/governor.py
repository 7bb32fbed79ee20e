"""Request governor -- paced, cached, rate-limit-aware access to the API.

:class:`RequestGovernor` owns everything the produced callables share: the
response cache, the diagnostics logger, the bearer token, the
:class:`httpx.AsyncClient`, and the in-flight counter.
:meth:`RequestGovernor.new_governed_fetch` hands out :class:`GovernedFetch`
callables that behave like a fetch function:

1. A GET made through a callable created with ``use_cache=True`` is served
   from the cache when a fresh entry exists.
2. Every other request waits the pacing interval, then goes out with an
   ``Authorization: Bearer`` header (caller headers win on conflict).
3. HTTP 429 puts the request to sleep for the rate-limit window and then
   sends it again, bypassing the cache, until the API accepts it or the
   optional retry cap is reached.
4. Any other status outside ``[200, 400)`` raises
   :class:`~quotafetch.exceptions.ApiError`.

Everything runs on one asyncio event loop.  The counter and the cache are
only touched between ``await`` points, so no locking is involved.  The
pacing delay is constant; it smooths bursts but does not cap concurrency.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional

import httpx

from quotafetch.cache.base import ResponseCacheInterface
from quotafetch.cache.memory import MemoryCache
from quotafetch.config import resolve_credential
from quotafetch.exceptions import ApiError, RateLimitExceededError
from quotafetch.models import GovernorConfig, PacingConfig, RequestConfig
from quotafetch.output import get_output
from quotafetch.response import Target, is_success

HTTP_TOO_MANY_REQUESTS = 429

# Keyword arguments httpx.AsyncClient.send() accepts alongside a prepared request.
_SEND_OPTIONS = frozenset({"auth", "follow_redirects"})


class GovernedFetch:
    """Fetch-like callable produced by :meth:`RequestGovernor.new_governed_fetch`.

    Args:
        governor: The governor whose cache, token, transport, and counter
            this callable uses.
        use_cache: Serve and store GET responses through the cache.
    """

    def __init__(self, governor: RequestGovernor, use_cache: bool = False) -> None:
        self._governor = governor
        self._use_cache = use_cache

    @property
    def use_cache(self) -> bool:
        return self._use_cache

    async def __call__(self, target: Target, **init: Any) -> httpx.Response:
        """Send a governed request.

        Args:
            target: URL string, :class:`httpx.URL`, or prepared
                :class:`httpx.Request`.
            **init: Request options -- ``method`` (default ``GET``),
                ``headers``, and anything :meth:`httpx.AsyncClient.request`
                accepts (``params``, ``json``, ``content``, ``data``, ...).

        Returns:
            The :class:`httpx.Response`, with a status in ``[200, 400)``.

        Raises:
            ApiError: On a terminal unsuccessful status.
            RateLimitExceededError: When HTTP 429 outlasts the retry cap.
            httpx.TransportError: Propagated unchanged from the transport.
        """
        return await self._governor.dispatch(target, use_cache=self._use_cache, **init)


class RequestGovernor:
    """Factory for governed fetch callables sharing one pacing state.

    Args:
        cache: Response cache consulted by cache-enabled callables.
        token: Bearer token injected into every outgoing request.
        logger: Object with a ``debug(message)`` method.  Defaults to the
            global :class:`~quotafetch.output.OutputManager`.
        pacing: Pacing interval, rate-limit window, and retry cap.
        client: Pre-built :class:`httpx.AsyncClient`.  When omitted the
            governor creates (and later closes) its own from
            *request_config*.
        request_config: Settings for the client the governor creates.

    Example::

        async with RequestGovernor(MemoryCache(60), token="secret") as governor:
            fetch = governor.new_governed_fetch(use_cache=True)
            response = await fetch("https://api.example.com/docs")
    """

    def __init__(
        self,
        cache: ResponseCacheInterface,
        token: str,
        logger: Any = None,
        pacing: Optional[PacingConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        request_config: Optional[RequestConfig] = None,
    ) -> None:
        self._cache = cache
        self._token = token
        self._logger = logger
        self._pacing = pacing or PacingConfig()
        self._request_config = request_config or RequestConfig()
        self._client = client
        self._owns_client = client is None
        self._in_flight = 0

    @classmethod
    def from_config(
        cls,
        config: GovernorConfig,
        logger: Any = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> RequestGovernor:
        """Build a governor with a :class:`MemoryCache` from *config*.

        Raises:
            ConfigError: If the token source cannot be resolved.
        """
        return cls(
            cache=MemoryCache(config.cache.ttl_seconds, logger=logger),
            token=resolve_credential(config.token_source),
            logger=logger,
            pacing=config.pacing,
            client=client,
            request_config=config.request,
        )

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> RequestGovernor:
        self._get_client()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client if the governor created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    @property
    def cache(self) -> ResponseCacheInterface:
        return self._cache

    @property
    def pacing(self) -> PacingConfig:
        return self._pacing

    @property
    def in_flight(self) -> int:
        """Number of requests currently waiting out their pacing delay."""
        return self._in_flight

    def new_governed_fetch(self, use_cache: bool = False) -> GovernedFetch:
        """Return a new :class:`GovernedFetch` bound to this governor."""
        return GovernedFetch(self, use_cache=use_cache)

    async def dispatch(
        self,
        target: Target,
        use_cache: bool = False,
        **init: Any,
    ) -> httpx.Response:
        """Run the full governed pipeline for one request.

        See :meth:`GovernedFetch.__call__` for arguments and errors.
        """
        key = self._request_key(target, init)
        cacheable = use_cache and _effective_method(target, init).upper() == "GET"
        retries = 0

        while True:
            response = await self._fetch_once(target, init, key, cacheable)
            status = response.status_code
            if is_success(status):
                return response
            if status != HTTP_TOO_MANY_REQUESTS:
                raise ApiError(response, key)

            limit = self._pacing.max_rate_limit_retries
            if limit is not None and retries >= limit:
                raise RateLimitExceededError(response, key, attempts=retries)
            retries += 1

            window = self._pacing.rate_limit_window
            self._log(
                f"Requests exceeded API rate limit, pausing API request to {key} for {window} s"
            )
            await asyncio.sleep(window)
            self._log(f"Retrying API request to {key} after {window} s pause")
            # Retries always go to the network and never populate the cache.
            cacheable = False

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    async def _fetch_once(
        self,
        target: Target,
        init: dict[str, Any],
        key: str,
        cacheable: bool,
    ) -> httpx.Response:
        """Serve from cache, or pace and send one live request."""
        if cacheable:
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        interval = self._pacing.pacing_interval
        self._in_flight += 1
        try:
            self._log(
                f"Enqueuing API request to {key}, executing in {interval} s. "
                f"There are {self._in_flight} request(s) in the queue"
            )
            await asyncio.sleep(interval)
        finally:
            self._in_flight -= 1

        response = await self._send(target, init)
        if cacheable and is_success(response.status_code):
            self._cache.set(key, response)
        return response

    async def _send(self, target: Target, init: dict[str, Any]) -> httpx.Response:
        """Issue the network call with the bearer token merged into the headers."""
        client = self._get_client()
        options = dict(init)
        method = options.pop("method", None)
        caller_headers = options.pop("headers", None)

        if isinstance(target, httpx.Request):
            unsupported = set(options) - _SEND_OPTIONS
            if unsupported:
                raise TypeError(
                    "Options not supported with an httpx.Request target: "
                    + ", ".join(sorted(unsupported))
                )
            headers = self._auth_headers()
            headers.update(target.headers)
            if caller_headers:
                headers.update(caller_headers)
            request = httpx.Request(
                method or target.method,
                target.url,
                headers=headers,
                stream=target.stream,
                extensions=target.extensions,
            )
            return await client.send(request, **options)

        headers = self._auth_headers()
        if caller_headers:
            headers.update(caller_headers)
        return await client.request(method or "GET", target, headers=headers, **options)

    def _request_key(self, target: Target, init: dict[str, Any]) -> str:
        """Return the absolute URL the request will hit, query string included.

        The URL is resolved the way the client will send it, so relative
        targets pick up the client's ``base_url`` and ``params`` are encoded
        into the key.
        """
        if isinstance(target, httpx.Request):
            return str(target.url)
        request = self._get_client().build_request("GET", target, params=init.get("params"))
        return str(request.url)

    def _auth_headers(self) -> httpx.Headers:
        return httpx.Headers({"Authorization": f"Bearer {self._token}"})

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            config = self._request_config
            self._client = httpx.AsyncClient(
                base_url=config.base_url or "",
                timeout=config.timeout,
                verify=config.verify_ssl,
                follow_redirects=True,
            )
            self._owns_client = True
        return self._client

    def _log(self, message: str) -> None:
        logger = self._logger if self._logger is not None else get_output()
        logger.debug(message)


def _effective_method(target: Target, init: dict[str, Any]) -> str:
    method = init.get("method")
    if method:
        return str(method)
    if isinstance(target, httpx.Request):
        return target.method
    return "GET"
