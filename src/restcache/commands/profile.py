"""Profile commands -- manage the named API targets stored under the config directory.

Example::

    restcache profile add items --base-url https://api.example.com --suffix .json
    restcache profile list
    restcache profile remove items --force
"""

from __future__ import annotations

from typing import Optional

import typer

from restcache.config import (
    delete_profile,
    list_profiles,
    load_global_config,
    load_profile,
    profile_exists,
    save_global_config,
    save_profile,
)
from restcache.exceptions import ConfigError
from restcache.models import ClientConfig, Profile
from restcache.output import error, info, print_table, success, suggest


profile_app = typer.Typer(no_args_is_help=True)


@profile_app.command("add")
def profile_add(
    name: str = typer.Argument(help="Profile name."),
    base_url: str = typer.Option(..., "--base-url", help="Prefix for every request path."),
    suffix: str = typer.Option("", "--suffix", help="Suffix appended to every path."),
    username: Optional[str] = typer.Option(None, "--username", help="Basic auth user."),
    password: Optional[str] = typer.Option(None, "--password", help="Basic auth password."),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Request timeout in seconds."),
    trust_all: bool = typer.Option(
        False, "--trust-all", help="Accept every TLS certificate for this target."
    ),
    default: bool = typer.Option(False, "--default", help="Make this the default profile."),
) -> None:
    """Create or overwrite a profile."""
    if profile_exists(name):
        info(f'Profile "{name}" already exists and will be overwritten.')

    client = ClientConfig(
        base_url=base_url,
        url_suffix=suffix,
        username=username,
        password=password,
        timeout=timeout,
        accept_all_certificates=trust_all,
    )
    save_profile(Profile(name=name, client=client))
    success(f'Profile "{name}" saved.')

    if default:
        config = load_global_config()
        save_global_config(config.model_copy(update={"default_profile": name}))
        info(f'"{name}" is now the default profile.')
    else:
        suggest(f"Use it: restcache --profile {name} request GET /")


@profile_app.command("list")
def profile_list() -> None:
    """List stored profiles with their base URLs."""
    names = list_profiles()
    if not names:
        info("No profiles configured.")
        suggest("Create one: restcache profile add NAME --base-url URL")
        return

    default_name = load_global_config().default_profile
    rows: list[list[str]] = []
    for name in names:
        try:
            base_url = load_profile(name).client.base_url
        except ConfigError:
            base_url = "(invalid)"
        rows.append([name, base_url, "*" if name == default_name else ""])

    print_table(["profile", "base_url", "default"], rows, title="Profiles")


@profile_app.command("remove")
def profile_remove(
    name: str = typer.Argument(help="Profile name."),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Delete a profile, clearing it as the default if it was one."""
    if not profile_exists(name):
        error(f'Profile "{name}" not found.')
        raise typer.Exit(code=2)

    if not force and not typer.confirm(f'Remove profile "{name}"?'):
        info("Cancelled.")
        raise typer.Exit()

    delete_profile(name)

    config = load_global_config()
    if config.default_profile == name:
        save_global_config(config.model_copy(update={"default_profile": None}))
        info("Default profile cleared.")

    success(f'Profile "{name}" removed.')
