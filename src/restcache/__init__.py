"""restcache -- JSON REST calls with a policy-driven response cache.

Wraps GET/POST/PUT/DELETE requests with optional on-disk caching of GET
responses, JSON response parsing, and per-call result handles.  Each call
picks a :class:`~restcache.models.CachePolicy` that decides whether the
cached body, the network, or both answer it.

Typical use::

    from restcache import ApiClient, CachePolicy, CacheStore, ClientConfig

    async with ApiClient(ClientConfig(base_url="https://api.example.com"),
                         store=CacheStore()) as api:
        api.add_parameter("id", 42)
        api.set_cache_policy(CachePolicy.CACHE_ELSE_NETWORK)
        result = await api.get("/items")

Modules:
    models: Pydantic models for requests, results, and configuration.
    cache: File-per-key response store and cache key derivation.
    client: Dispatcher, policy coordinator, API facade, request handles.
    jsonutil: Helpers for decoded JSON arrays.
    config: XDG-aware configuration and profile management.
    output: stdout/stderr diagnostics with Rich support.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"

from restcache.cache import CacheStore, cache_key  # noqa: E402
from restcache.client import ApiClient, Dispatcher, PolicyCoordinator, RequestHandle  # noqa: E402
from restcache.models import (  # noqa: E402
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

__all__ = [
    "ApiClient",
    "CachePolicy",
    "CacheStore",
    "ClientConfig",
    "ContentType",
    "Dispatcher",
    "HTTPMethod",
    "PolicyCoordinator",
    "Request",
    "RequestHandle",
    "Result",
    "StatusCodeError",
    "Success",
    "TransportError",
    "cache_key",
]
