"""Canonical Pydantic models shared across all restcache modules.

The models fall into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`ClientConfig`, :class:`CacheConfig`, :class:`GlobalConfig`, and
    :class:`Profile`.

**Request/result models** -- built per call and passed between the API
facade, the policy coordinator, and the dispatcher:
    :class:`HTTPMethod`, :class:`ContentType`, :class:`CachePolicy`,
    :class:`Request`, and the :data:`Result` union of :class:`Success`,
    :class:`StatusCodeError`, and :class:`TransportError`.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# --- Enumerations ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods supported by the dispatcher."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class ContentType(str, enum.Enum):
    """Request body encodings for POST and PUT."""

    FORM = "application/x-www-form-urlencoded"
    JSON = "application/json"


class CachePolicy(str, enum.Enum):
    """Strategy controlling cache-vs-network precedence for a single request.

    ``IGNORE_CACHE``
        Never read or write the cache.
    ``CACHE_THEN_NETWORK``
        Deliver the cached body (if any) immediately, then still hit the
        network and deliver that result as well.
    ``NETWORK_ONLY``
        Skip cache reads, but store a successful response.
    ``CACHE_ELSE_NETWORK``
        Deliver the cached body and stop; hit the network only on a miss.
    ``UPDATE_CACHE``
        Hit the network and store the response without delivering anything
        to the caller.
    """

    IGNORE_CACHE = "ignore_cache"
    CACHE_THEN_NETWORK = "cache_then_network"
    NETWORK_ONLY = "network_only"
    CACHE_ELSE_NETWORK = "cache_else_network"
    UPDATE_CACHE = "update_cache"

    @property
    def reads_cache(self) -> bool:
        return self in (CachePolicy.CACHE_THEN_NETWORK, CachePolicy.CACHE_ELSE_NETWORK)

    @property
    def writes_cache(self) -> bool:
        return self is not CachePolicy.IGNORE_CACHE

    @property
    def delivers(self) -> bool:
        return self is not CachePolicy.UPDATE_CACHE


# --- Request ---


class Request(BaseModel):
    """A fully-built HTTP request.

    Instances are frozen: once handed to the dispatcher the request cannot
    change, so the cache key computed before dispatch is the one used to
    store the response.

    Example::

        Request(
            method=HTTPMethod.GET,
            url="https://api.example.com/items",
            params=(("id", "42"),),
        )
    """

    model_config = ConfigDict(frozen=True)

    method: HTTPMethod
    url: str = Field(description="Full endpoint URL (base + path + suffix)")
    params: tuple[tuple[str, str], ...] = Field(
        default=(), description="Ordered name/value pairs"
    )
    content_type: Optional[ContentType] = None

    @property
    def is_cacheable(self) -> bool:
        """Only GET requests may read from or write to the cache."""
        return self.method is HTTPMethod.GET


# --- Results ---


class Success(BaseModel):
    """A 2xx response (or a cache hit).

    ``data`` holds the parsed body (``dict``, ``list``, ``str`` or ``None``),
    ``raw`` the body text exactly as received or stored.
    """

    kind: Literal["success"] = "success"
    data: Any = None
    raw: Optional[str] = None
    from_cache: bool = False


class StatusCodeError(BaseModel):
    """A response whose status code falls outside ``[200, 300)``."""

    kind: Literal["status_code_error"] = "status_code_error"
    status_code: int
    body: str = ""

    @property
    def message(self) -> str:
        return self.body or f"HTTP {self.status_code}"


class TransportError(BaseModel):
    """A network, protocol, or body-decoding failure."""

    kind: Literal["transport_error"] = "transport_error"
    message: str


Result = Annotated[
    Union[Success, StatusCodeError, TransportError],
    Field(discriminator="kind"),
]


# --- Configuration ---


class ClientConfig(BaseModel):
    """Connection settings for the dispatcher and API facade."""

    base_url: str = Field(default="", description="Prefix prepended to every path")
    url_suffix: str = Field(default="", description="Suffix appended to every path")
    host: Optional[str] = Field(
        default=None, description="Target host used when base_url is relative"
    )
    port: int = Field(default=80, description="Plain HTTP port")
    ssl_port: int = Field(default=443, description="HTTPS port")
    use_ssl: bool = Field(default=True, description="Use HTTPS for relative URLs")
    accept_all_certificates: bool = Field(
        default=False,
        description="Skip TLS certificate validation (development only)",
    )
    username: Optional[str] = Field(default=None, description="Basic auth user")
    password: Optional[str] = Field(default=None, description="Basic auth password")
    user_agent: Optional[str] = None
    content_type: Optional[ContentType] = Field(
        default=None, description="Body encoding for POST/PUT"
    )
    timeout: Optional[float] = Field(
        default=None, description="Request timeout in seconds (httpx default if unset)"
    )


class CacheConfig(BaseModel):
    """Response cache settings."""

    enabled: bool = Field(default=True, description="Enable response caching")
    directory: Optional[str] = Field(
        default=None, description="Override for the cache directory"
    )


class GlobalConfig(BaseModel):
    """Global configuration persisted by :func:`~restcache.config.save_global_config`."""

    default_profile: Optional[str] = None
    cache: CacheConfig = Field(default_factory=CacheConfig)


class Profile(BaseModel):
    """A named API target.

    Example::

        Profile(name="items", client=ClientConfig(base_url="https://api.example.com"))
    """

    name: str = Field(description="Profile name (also the file stem on disk)")
    client: ClientConfig = Field(default_factory=ClientConfig)
