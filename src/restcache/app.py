"""Typer application and the ``restcache`` console-script entry point."""

from __future__ import annotations

import sys
from typing import Optional

import typer

from restcache import __version__
from restcache.commands.cache import cache_app
from restcache.commands.config import config_app
from restcache.commands.profile import profile_app
from restcache.commands.request import request_command
from restcache.exceptions import RestCacheError
from restcache.output import OutputFormat, OutputManager, error, set_output


app = typer.Typer(
    name="restcache",
    help="Call JSON REST APIs with a policy-driven response cache.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"restcache {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit."
    ),
    profile: Optional[str] = typer.Option(None, "--profile", "-P", help="Profile name to use."),
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Print results as tab-separated text."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print results and errors."),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show cache hits, misses and dispatched requests."
    ),
) -> None:
    """Install the output manager for this invocation and remember the profile."""
    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["profile"] = profile


app.command("request")(request_command)
app.add_typer(cache_app, name="cache", help="Inspect and clear the response cache.")
app.add_typer(config_app, name="config", help="Read and change global settings.")
app.add_typer(profile_app, name="profile", help="Manage named API targets.")


def main(argv: Optional[list[str]] = None) -> None:
    """Run the CLI.

    A :class:`~restcache.exceptions.RestCacheError` that escapes a command
    is printed as a one-line error and mapped to its ``exit_code``.  Any
    other exception keeps its traceback.
    """
    try:
        app(args=argv)
    except RestCacheError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
