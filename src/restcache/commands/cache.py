"""Cache commands -- inspect and clear the response cache."""

from __future__ import annotations

import typer

from restcache.cache import CacheStore, cache_key
from restcache.commands.request import parse_params, resolve_client
from restcache.exceptions import RestCacheError
from restcache.output import error, format_response, info, print_table, success


cache_app = typer.Typer(no_args_is_help=True)


@cache_app.command("clear")
def cache_clear(ctx: typer.Context) -> None:
    """Remove every cached response."""
    config, _ = resolve_client(ctx)
    removed = CacheStore(config=config.cache).clear()
    success(f"Removed {removed} cached response(s).")


@cache_app.command("stats")
def cache_stats(ctx: typer.Context) -> None:
    """Show the cache directory and number of entries."""
    config, _ = resolve_client(ctx)
    stats = CacheStore(config=config.cache).stats()
    print_table(
        ["setting", "value"],
        [[key, str(value)] for key, value in stats.items()],
        title="Response cache",
    )


@cache_app.command("key")
def cache_key_command(
    ctx: typer.Context,
    path: str = typer.Argument(help="Path appended to the base URL."),
    param: list[str] = typer.Option(
        [], "--param", "-p", help="Parameter as name=value (repeatable, ordered)."
    ),
) -> None:
    """Print the cache key a GET for PATH and parameters would use.

    Parameter order matters: ``-p a=1 -p b=2`` and ``-p b=2 -p a=1`` give
    different keys.
    """
    try:
        params = parse_params(param)
        config, client = resolve_client(ctx)
    except RestCacheError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    url = f"{client.base_url}{path}{client.url_suffix}"
    key = cache_key(url, params)
    store = CacheStore(config=config.cache)
    info(f"Endpoint: {url}")
    format_response({"key": key, "cached": store.exists(key)})
