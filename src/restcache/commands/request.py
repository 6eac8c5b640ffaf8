"""Request command -- issue one call through the cache-aware client.

Example::

    restcache request GET /items -p id=42 --policy cache_else_network
    restcache --json request POST /items -p name=widget --json-body
"""

from __future__ import annotations

import asyncio
from typing import Optional

import typer

from restcache.cache import CacheStore
from restcache.client import ApiClient
from restcache.exceptions import (
    ConnectionError_,
    InvalidUsageError,
    RequestFailedError,
    RestCacheError,
)
from restcache.models import (
    CachePolicy,
    ClientConfig,
    ContentType,
    GlobalConfig,
    HTTPMethod,
    Result,
    StatusCodeError,
    Success,
    TransportError,
)
from restcache.output import error, format_response, info


def parse_params(raw: list[str]) -> list[tuple[str, str]]:
    """Split ``name=value`` strings, keeping their order.

    Raises:
        InvalidUsageError: If an item has no ``=``.
    """
    params: list[tuple[str, str]] = []
    for item in raw:
        name, sep, value = item.partition("=")
        if not sep or not name:
            raise InvalidUsageError(f"Expected name=value, got: {item!r}")
        params.append((name, value))
    return params


def resolve_client(
    ctx: typer.Context,
    base_url: Optional[str] = None,
) -> tuple[GlobalConfig, ClientConfig]:
    """Return the global config and the effective client settings for a command."""
    from restcache.config import resolve_config

    cli_profile = ctx.obj.get("profile") if ctx.obj else None
    config, profile = resolve_config(cli_profile)
    client = profile.client if profile is not None else ClientConfig()
    if base_url is not None:
        client = client.model_copy(update={"base_url": base_url})
    return config, client


async def _run(
    client_config: ClientConfig,
    store: CacheStore,
    method: HTTPMethod,
    path: str,
    params: list[tuple[str, str]],
    policy: CachePolicy,
    content_type: Optional[ContentType],
) -> list[Result]:
    async with ApiClient(client_config, store=store) as api:
        for name, value in params:
            api.add_parameter(name, value)
        api.set_cache_policy(policy)
        api.set_content_type(content_type)
        # Errors are reported by the command itself.
        api.set_error_callback(lambda result: None)
        handle = api.request(method, path)
        await handle
        return handle.results


def request_command(
    ctx: typer.Context,
    method: HTTPMethod = typer.Argument(help="HTTP method.", case_sensitive=False),
    path: str = typer.Argument(help="Path appended to the base URL."),
    param: list[str] = typer.Option(
        [], "--param", "-p", help="Parameter as name=value (repeatable, ordered)."
    ),
    policy: CachePolicy = typer.Option(
        CachePolicy.IGNORE_CACHE,
        "--policy",
        case_sensitive=False,
        help="Cache policy for this request.",
    ),
    json_body: bool = typer.Option(
        False, "--json-body", help="Send POST/PUT parameters as a JSON object."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Override the profile's base URL."
    ),
) -> None:
    """Send a request and print every delivered result.

    Under ``cache_then_network`` a cached body and the fresh body are both
    printed.  Under ``update_cache`` nothing is printed.

    Raises:
        typer.Exit: With code 2 for malformed parameters, 5 for a
            status-code error, 6 for a transport error.
    """
    try:
        params = parse_params(param)
        config, client_config = resolve_client(ctx, base_url)
    except RestCacheError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    store = CacheStore(config=config.cache)
    content_type = ContentType.JSON if json_body else None
    results = asyncio.run(
        _run(client_config, store, method, path, params, policy, content_type)
    )

    if not results:
        info("No result delivered.")
        return

    failure: Optional[RestCacheError] = None
    for result in results:
        if isinstance(result, Success):
            info("Cached response" if result.from_cache else "Network response")
            format_response(result.data)
        elif isinstance(result, StatusCodeError):
            if result.body:
                format_response(result.body)
            failure = RequestFailedError(f"HTTP {result.status_code}")
        elif isinstance(result, TransportError):
            failure = ConnectionError_(result.message)

    if failure is not None:
        error(str(failure))
        raise typer.Exit(code=failure.exit_code)
