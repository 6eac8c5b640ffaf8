"""Caller-facing API client.

:class:`ApiClient` is the builder-style facade applications use: set the
base URL, add parameters, pick a cache policy, register callbacks, then call
:meth:`~ApiClient.get` / :meth:`~ApiClient.post` / :meth:`~ApiClient.put` /
:meth:`~ApiClient.delete`.  Each call snapshots the pending state into an
immutable :class:`~restcache.models.Request`, resets the builder, and
returns a :class:`~restcache.client.handle.RequestHandle`.

Example::

    async with ApiClient(ClientConfig(base_url="https://api.example.com")) as api:
        api.add_parameter("id", 42)
        api.set_cache_policy(CachePolicy.CACHE_ELSE_NETWORK)
        api.set_callback(print)
        result = await api.get("/items")
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import httpx

from restcache.cache import CacheStore
from restcache.client.coordinator import PolicyCoordinator
from restcache.client.dispatcher import Dispatcher
from restcache.client.handle import RequestHandle
from restcache.models import (
    CachePolicy,
    ClientConfig,
    ContentType,
    HTTPMethod,
    Request,
    Result,
    StatusCodeError,
    Success,
    TransportError,
)
from restcache.output import debug, warning

SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[StatusCodeError | TransportError], None]

DEFAULT_LOADING_MESSAGE = "Loading..."


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ApiClient:
    """Builder-style REST client with policy-driven response caching.

    Args:
        config: Connection settings.  ``base_url`` and ``url_suffix`` seed
            the builder; the rest configures the dispatcher.
        store: Response cache.  ``None`` disables caching.
        dispatcher: Pre-built dispatcher.  Created from *config* (and
            *transport*) when omitted.
        transport: httpx transport for the default dispatcher.

    Callbacks registered with :meth:`set_callback` receive the parsed body of
    every delivered :class:`~restcache.models.Success`.  Callbacks registered
    with :meth:`set_error_callback` receive the
    :class:`~restcache.models.StatusCodeError` or
    :class:`~restcache.models.TransportError` itself.  Without an error
    callback, errors are printed as warnings.
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        store: Optional[CacheStore] = None,
        dispatcher: Optional[Dispatcher] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._dispatcher = dispatcher or Dispatcher(self._config, transport=transport)
        self._store = store
        self._coordinator = PolicyCoordinator(self._dispatcher, store)

        self._base_url = self._config.base_url
        self._url_suffix = self._config.url_suffix
        self._current: Optional[RequestHandle] = None
        self.reset()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._dispatcher.aclose()

    # ------------------------------------------------------------------ #
    # Builder state
    # ------------------------------------------------------------------ #

    def reset(self) -> None:
        """Clear per-call state: parameters, policy, callbacks, loading message."""
        self._parameters: list[tuple[str, str]] = []
        self._policy = CachePolicy.IGNORE_CACHE
        self._content_type: Optional[ContentType] = None
        self._callback: Optional[SuccessCallback] = None
        self._error_callback: Optional[ErrorCallback] = None
        self._loading_message: Optional[str] = DEFAULT_LOADING_MESSAGE

    def set_base_url(self, base_url: str) -> ApiClient:
        self._base_url = base_url
        return self

    def set_url_suffix(self, suffix: str) -> ApiClient:
        self._url_suffix = suffix
        return self

    def endpoint_for(self, path: str) -> str:
        """Return ``base_url + path + url_suffix``."""
        return f"{self._base_url}{path}{self._url_suffix}"

    def add_parameter(self, name: str, value: Any) -> ApiClient:
        """Append a parameter.  Order is kept and affects the cache key."""
        self._parameters.append((name, _stringify(value)))
        return self

    @property
    def parameters(self) -> tuple[tuple[str, str], ...]:
        return tuple(self._parameters)

    def set_cache_policy(self, policy: CachePolicy) -> ApiClient:
        self._policy = CachePolicy(policy)
        return self

    @property
    def cache_policy(self) -> CachePolicy:
        return self._policy

    def set_content_type(self, content_type: Optional[ContentType]) -> ApiClient:
        self._content_type = content_type
        return self

    def set_loading_message(self, message: Optional[str]) -> ApiClient:
        """Store a loading hint for presentation layers.  Not used by the client."""
        self._loading_message = message
        return self

    @property
    def loading_message(self) -> Optional[str]:
        return self._loading_message

    def set_callback(self, callback: Optional[SuccessCallback]) -> ApiClient:
        self._callback = callback
        return self

    def set_error_callback(self, callback: Optional[ErrorCallback]) -> ApiClient:
        self._error_callback = callback
        return self

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    def get(self, path: str) -> RequestHandle:
        return self.request(HTTPMethod.GET, path)

    def post(self, path: str) -> RequestHandle:
        return self.request(HTTPMethod.POST, path)

    def put(self, path: str) -> RequestHandle:
        return self.request(HTTPMethod.PUT, path)

    def delete(self, path: str) -> RequestHandle:
        return self.request(HTTPMethod.DELETE, path)

    def request(self, method: HTTPMethod | str, path: str) -> RequestHandle:
        """Build a request from the pending state and start it.

        Must be called from within a running event loop.  The pending state
        is reset before this method returns.
        """
        if not isinstance(method, HTTPMethod):
            method = HTTPMethod(method.upper())
        request = Request(
            method=method,
            url=self.endpoint_for(path),
            params=self.parameters,
            content_type=self._content_type,
        )
        policy = self._policy
        deliver = self._make_deliver(self._callback, self._error_callback)
        self.reset()

        # Earlier handles stay independent; only the reference moves.
        self._current = self._coordinator.start(request, policy, deliver)
        return self._current

    @property
    def current(self) -> Optional[RequestHandle]:
        """The handle returned by the most recent call."""
        return self._current

    def cancel_request(self) -> bool:
        """Cancel the most recent call's network request."""
        if self._current is None:
            return False
        return self._current.cancel()

    def clear_cache(self) -> int:
        """Remove every cached response.  Returns the number removed."""
        if self._store is None:
            return 0
        return self._store.clear()

    # ------------------------------------------------------------------ #
    # Delivery
    # ------------------------------------------------------------------ #

    @staticmethod
    def _make_deliver(
        callback: Optional[SuccessCallback],
        error_callback: Optional[ErrorCallback],
    ) -> Callable[[Result], None]:
        def deliver(result: Result) -> None:
            if isinstance(result, Success):
                if callback is not None:
                    callback(result.data)
                else:
                    debug("Request succeeded with no success callback registered")
            elif error_callback is not None:
                error_callback(result)
            else:
                warning(result.message)

        return deliver
