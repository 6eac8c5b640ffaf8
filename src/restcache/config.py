"""Configuration management with XDG paths, atomic writes, and precedence resolution.

This module handles all persistent configuration for restcache:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.restcache/`` on macOS and Windows. See :func:`get_config_dir`,
  :func:`get_cache_dir`, :func:`get_profiles_dir`.
* **Global config** -- A single :class:`~restcache.models.GlobalConfig`
  JSON file storing the default profile and cache settings.
* **Profiles** -- One JSON file per API target, each deserialised into a
  :class:`~restcache.models.Profile`.
* **Precedence resolution** -- :func:`resolve_config` merges the CLI flag,
  environment variables, and the global config into the effective profile.

All file writes, including cache entries written by
:class:`~restcache.cache.CacheStore`, go through :func:`atomic_write` so a
reader never observes a partially written file.
"""

from __future__ import annotations

import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional

from restcache.exceptions import ConfigError
from restcache.models import GlobalConfig, Profile

_APP_NAME = "restcache"
_CONFIG_FILENAME = "config.json"

ENV_PROFILE = "RESTCACHE_PROFILE"
ENV_BASE_URL = "RESTCACHE_BASE_URL"


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform uses XDG Base Directory paths (Linux/BSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    """Fallback base directory for non-XDG platforms (macOS, Windows)."""
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    """Resolve an XDG base directory from an env var with fallback segments under $HOME."""
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/restcache/`` (default ``~/.config/restcache/``).
    On macOS/Windows: ``~/.restcache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_cache_dir() -> Path:
    """Return the cache directory, creating it if necessary.

    Holds the response cache. Everything under it can be deleted at any
    time; the next request simply misses.

    On Linux/BSD: ``$XDG_CACHE_HOME/restcache/`` (default ``~/.cache/restcache/``).
    On macOS/Windows: ``~/.restcache/cache/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CACHE_HOME", (".cache",)) / _APP_NAME
    else:
        path = _fallback_base_dir() / "cache"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_profiles_dir() -> Path:
    """Return the profiles directory (``<config_dir>/profiles/``), creating it if necessary."""
    path = get_config_dir() / "profiles"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Atomic file writes ---


def atomic_write(path: Path, data: str | bytes) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On success the temp
    file is renamed over *path*; on any failure the temp file is removed and
    the original exception propagates.

    Args:
        path: Destination file.
        data: Text (written as UTF-8) or raw bytes.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = data.encode("utf-8") if isinstance(data, str) else data

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="wb",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        )
        tmp_path = fd.name
        fd.write(payload)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None  # prevent double-close below
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Global config ---


def _global_config_path() -> Path:
    return get_config_dir() / _CONFIG_FILENAME


def load_global_config() -> GlobalConfig:
    """Load the global configuration from the config directory.

    Returns:
        The deserialised :class:`~restcache.models.GlobalConfig`, or a
        default instance when the file does not exist.

    Raises:
        ConfigError: If the file exists but contains invalid JSON or fails
            validation.
    """
    path = _global_config_path()
    if not path.is_file():
        return GlobalConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return GlobalConfig.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid global config at {path}: {exc}") from exc


def save_global_config(config: GlobalConfig) -> None:
    """Persist the global configuration atomically to disk."""
    data = config.model_dump(mode="json")
    atomic_write(_global_config_path(), json.dumps(data, indent=2) + "\n")


# --- Profiles ---


def _profile_path(name: str) -> Path:
    return get_profiles_dir() / f"{name}.json"


def list_profiles() -> list[str]:
    """Return all profile names found in the profiles directory, sorted alphabetically."""
    return sorted(p.stem for p in get_profiles_dir().glob("*.json") if p.is_file())


def load_profile(name: str) -> Profile:
    """Load and validate a profile from disk.

    Raises:
        ConfigError: If the profile file does not exist, contains invalid
            JSON, or fails validation.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Profile.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise ConfigError(f"Invalid profile '{name}' at {path}: {exc}") from exc


def save_profile(profile: Profile) -> None:
    """Persist a profile atomically to the profiles directory."""
    data = profile.model_dump(mode="json")
    atomic_write(_profile_path(profile.name), json.dumps(data, indent=2) + "\n")


def delete_profile(name: str) -> None:
    """Delete a profile's JSON file from disk.

    Raises:
        ConfigError: If the profile does not exist.
    """
    path = _profile_path(name)
    if not path.is_file():
        raise ConfigError(f"Profile '{name}' not found at {path}")
    path.unlink()


def profile_exists(name: str) -> bool:
    return _profile_path(name).is_file()


# --- Precedence resolution ---


def resolve_config(
    cli_profile: Optional[str] = None,
) -> tuple[GlobalConfig, Optional[Profile]]:
    """Resolve the effective global config and active profile.

    Profile selection precedence (highest first):

    1. *cli_profile* (``--profile`` flag)
    2. ``RESTCACHE_PROFILE`` environment variable
    3. ``default_profile`` from the global config

    When ``RESTCACHE_BASE_URL`` is set it overrides the selected profile's
    ``client.base_url``. If no profile is selected but the variable is set,
    an ad-hoc profile named ``env`` is returned.

    Returns:
        A ``(global_config, profile)`` tuple. ``profile`` is ``None`` when
        nothing selects one.

    Raises:
        ConfigError: If the selected profile does not exist or is invalid.
    """
    config = load_global_config()

    name = cli_profile or os.environ.get(ENV_PROFILE) or config.default_profile
    profile = load_profile(name) if name else None

    base_url = os.environ.get(ENV_BASE_URL)
    if base_url:
        if profile is None:
            profile = Profile(name="env")
        profile = profile.model_copy(
            update={"client": profile.client.model_copy(update={"base_url": base_url})}
        )

    return config, profile
