"""Request dispatcher -- executes a :class:`~restcache.models.Request` over httpx.

:class:`Dispatcher` wraps :class:`httpx.AsyncClient` and turns every request
into exactly one :data:`~restcache.models.Result`:

- **Success** -- status in ``[200, 300)``; the body is parsed with
  :func:`~restcache.client.response.parse_body`.
- **StatusCodeError** -- any other status, carrying the raw body.
- **TransportError** -- any httpx transport/protocol failure, or a body
  starting with ``{`` or ``[`` that does not decode.

Requests always send ``Accept: application/json`` and
``Accept-Encoding: gzip``; gzip bodies are decompressed by httpx before
parsing.  Requests run as independent :mod:`asyncio` tasks (see
:meth:`Dispatcher.submit`), so each call can be cancelled on its own.

See Also:
    :class:`~restcache.client.coordinator.PolicyCoordinator`, which decides
    whether a request reaches the dispatcher at all.
"""

from __future__ import annotations

import asyncio
import json
from typing import Optional
from urllib.parse import urlencode, urlsplit

import httpx

from restcache.client.response import parse_body
from restcache.exceptions import ResponseParseError
from restcache.models import (
    ClientConfig,
    ContentType,
    HTTPMethod,
    Request,
    Result,
    StatusCodeError,
    Success,
    TransportError,
)
from restcache.output import debug

# Explicit timeouts used when certificate validation is disabled.
TRUST_ALL_CONNECT_TIMEOUT = 15.0
TRUST_ALL_READ_TIMEOUT = 45.0


class Dispatcher:
    """Asynchronous request executor.

    The underlying :class:`httpx.AsyncClient` is created on first use (or on
    ``__aenter__``) and shared by every request this dispatcher runs.

    Args:
        config: Connection settings (host/ports, TLS mode, basic auth,
            user agent, body encoding, timeout).
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests.

    Example::

        async with Dispatcher(ClientConfig()) as dispatcher:
            result = await dispatcher.dispatch(request)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or ClientConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def config(self) -> ClientConfig:
        return self._config

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> Dispatcher:
        self._get_client()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def submit(self, request: Request) -> asyncio.Task[Result]:
        """Schedule *request* on the running event loop and return its task.

        Cancelling the task interrupts the in-flight request; no result is
        produced for a cancelled task.
        """
        return asyncio.create_task(
            self.dispatch(request),
            name=f"restcache {request.method.value} {request.url}",
        )

    async def dispatch(self, request: Request) -> Result:
        """Execute *request* and classify the outcome.

        Never raises for network or protocol failures; those are reported as
        :class:`~restcache.models.TransportError`.  :class:`asyncio.CancelledError`
        propagates unchanged.
        """
        client = self._get_client()
        url = self.build_url(request)
        debug(f"{request.method.value} {url}")

        try:
            response = await client.request(
                request.method.value,
                url,
                headers=self.build_headers(request),
                content=self.build_content(request),
            )
            body = response.text
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            debug(f"Transport error for {request.method.value} {url}: {exc!r}")
            return TransportError(message=str(exc) or exc.__class__.__name__)

        debug(f"HTTP {response.status_code} for {request.method.value} {url}")
        return self.classify(response.status_code, body)

    @staticmethod
    def classify(status_code: int, body: str) -> Result:
        """Map a status code and body to a result value."""
        if not 200 <= status_code < 300:
            return StatusCodeError(status_code=status_code, body=body)
        try:
            data = parse_body(body)
        except ResponseParseError as exc:
            return TransportError(message=str(exc))
        return Success(data=data, raw=body)

    # ------------------------------------------------------------------ #
    # Request building
    # ------------------------------------------------------------------ #

    def build_url(self, request: Request) -> str:
        """Return the absolute request URL, with GET parameters in the query string."""
        url = self._absolute(request.url)
        if request.method is HTTPMethod.GET and request.params:
            separator = "&" if "?" in url else "?"
            url = f"{url}{separator}{urlencode(request.params)}"
        return url

    def build_headers(self, request: Request) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Accept-Encoding": "gzip",
        }
        content_type = self._content_type(request)
        if content_type is not None:
            headers["Content-Type"] = content_type.value
        if self._config.user_agent:
            headers["User-Agent"] = self._config.user_agent
        return headers

    def build_content(self, request: Request) -> Optional[bytes]:
        """Encode POST/PUT parameters as a form body or a JSON object."""
        if request.method not in (HTTPMethod.POST, HTTPMethod.PUT):
            return None
        if self._content_type(request) is ContentType.JSON:
            return json.dumps(dict(request.params)).encode("utf-8")
        return urlencode(request.params).encode("utf-8")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _content_type(self, request: Request) -> Optional[ContentType]:
        content_type = request.content_type or self._config.content_type
        if content_type is None and request.method in (HTTPMethod.POST, HTTPMethod.PUT):
            return ContentType.FORM
        return content_type

    def _absolute(self, url: str) -> str:
        """Resolve a relative endpoint against the configured host and port."""
        if urlsplit(url).scheme or not self._config.host:
            return url
        if self._config.use_ssl:
            origin = f"https://{self._config.host}:{self._config.ssl_port}"
        else:
            origin = f"http://{self._config.host}:{self._config.port}"
        if not url.startswith("/"):
            url = f"/{url}"
        return f"{origin}{url}"

    def _timeout(self) -> httpx.Timeout:
        # The trust-all mode always gets explicit timeouts; otherwise the
        # configured value, or httpx's default when none is configured.
        if self._config.accept_all_certificates:
            return httpx.Timeout(TRUST_ALL_READ_TIMEOUT, connect=TRUST_ALL_CONNECT_TIMEOUT)
        if self._config.timeout is not None:
            return httpx.Timeout(self._config.timeout)
        return httpx.Timeout(5.0)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            auth = None
            if self._config.username is not None and self._config.password is not None:
                auth = httpx.BasicAuth(self._config.username, self._config.password)
            self._client = httpx.AsyncClient(
                auth=auth,
                timeout=self._timeout(),
                verify=not self._config.accept_all_certificates,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client
