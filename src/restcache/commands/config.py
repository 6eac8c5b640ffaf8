"""Config commands -- read and change the global settings file.

Only a fixed set of keys is settable; each has its own value parser, so
``config set cache.enabled maybe`` is rejected instead of silently stored.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

import typer

from restcache.config import (
    get_config_dir,
    list_profiles,
    load_global_config,
    save_global_config,
)
from restcache.exceptions import InvalidUsageError
from restcache.models import GlobalConfig
from restcache.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)

_TRUE = ("true", "1", "yes", "on")
_FALSE = ("false", "0", "no", "off")
_UNSET = ("", "none", "null")


def _parse_flag(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise InvalidUsageError(f"Expected true or false, got: {value!r}")


def _parse_optional(value: str) -> Optional[str]:
    return None if value.strip().lower() in _UNSET else value


_SETTABLE: dict[str, Callable[[str], Any]] = {
    "default_profile": _parse_optional,
    "cache.enabled": _parse_flag,
    "cache.directory": _parse_optional,
}


def apply_setting(config: GlobalConfig, key: str, value: str) -> GlobalConfig:
    """Return a copy of *config* with the dotted *key* set from the string *value*.

    Raises:
        InvalidUsageError: For an unknown key or a value its parser rejects.
    """
    parser = _SETTABLE.get(key)
    if parser is None:
        known = ", ".join(sorted(_SETTABLE))
        raise InvalidUsageError(f"Unknown config key: {key} (known: {known})")

    parsed = parser(value)
    section, _, field = key.rpartition(".")
    if not section:
        return config.model_copy(update={field: parsed})
    nested = getattr(config, section).model_copy(update={field: parsed})
    return config.model_copy(update={section: nested})


@config_app.command("show")
def config_show() -> None:
    """Show the global config and the stored profile names."""
    info(f"Config directory: {get_config_dir()}")
    data = load_global_config().model_dump(mode="json")
    data["profiles"] = list_profiles()
    format_response(data)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="One of: default_profile, cache.enabled, cache.directory."),
    value: str = typer.Argument(help="New value; 'none' clears an optional setting."),
) -> None:
    """Change one setting.

    Example::

        restcache config set default_profile items
        restcache config set cache.enabled false
        restcache config set cache.directory none
    """
    try:
        updated = apply_setting(load_global_config(), key, value)
    except InvalidUsageError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    save_global_config(updated)
    success(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Restore the default settings. Profiles are kept."""
    if not force and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
