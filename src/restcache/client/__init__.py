"""HTTP client layer for restcache.

Classes:
    :class:`ApiClient` -- builder-style facade returning per-call handles.
    :class:`PolicyCoordinator` -- applies a cache policy to one request.
    :class:`Dispatcher` -- executes requests over :class:`httpx.AsyncClient`.
    :class:`RequestHandle` -- results and cancellation for one call.

Example::

    from restcache.client import ApiClient

    async with ApiClient(config, store=CacheStore()) as api:
        result = await api.get("/users")
"""

from restcache.client.api import ApiClient
from restcache.client.coordinator import PolicyCoordinator
from restcache.client.dispatcher import Dispatcher
from restcache.client.handle import RequestHandle

__all__ = ["ApiClient", "Dispatcher", "PolicyCoordinator", "RequestHandle"]
