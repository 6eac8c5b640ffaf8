"""File-per-key response store.

Each entry is a single file named by its cache key (see
:mod:`restcache.cache.keys`) holding the raw, unparsed response body.
There is no expiry, size bound, or locking: a write replaces whatever was
there, and writes go through :func:`~restcache.config.atomic_write` so a
concurrent reader sees either the old body or the new one.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Optional

from restcache.cache.keys import key_for_request
from restcache.config import atomic_write, get_cache_dir
from restcache.exceptions import CacheMissError, CacheWriteError
from restcache.models import CacheConfig, Request
from restcache.output import debug

_KEY_PATTERN = re.compile(r"^[0-9a-f]{40}$")


class CacheStore:
    """Disk-backed store for raw GET response bodies.

    Args:
        cache_dir: Root directory for the cache.  Entries live in a
            ``responses/`` subdirectory inside it.  Defaults to the
            directory from *config* or :func:`~restcache.config.get_cache_dir`.
        config: Cache configuration.  A disabled store reports every key as
            absent and ignores writes.

    Example::

        store = CacheStore("/tmp/api-cache")
        key = store.key_for(request)
        store.write(key, b'{"id": 42}')
        store.read(key)   # b'{"id": 42}'
    """

    def __init__(
        self,
        cache_dir: str | Path | None = None,
        config: Optional[CacheConfig] = None,
    ) -> None:
        self._config = config or CacheConfig()
        if cache_dir is None:
            cache_dir = self._config.directory or get_cache_dir()
        self._directory = Path(cache_dir) / "responses"

    @property
    def enabled(self) -> bool:
        return self._config.enabled

    @property
    def directory(self) -> Path:
        return self._directory

    def key_for(self, request: Request) -> str:
        return key_for_request(request)

    def exists(self, key: str) -> bool:
        """Return ``True`` if an entry is stored under *key*."""
        if not self.enabled:
            return False
        return self._path(key).is_file()

    def read(self, key: str) -> bytes:
        """Return the stored body for *key*.

        Raises:
            CacheMissError: If caching is disabled or the entry is absent
                or unreadable.
        """
        if not self.enabled:
            raise CacheMissError(f"Cache disabled, no entry for {key}")
        try:
            return self._path(key).read_bytes()
        except OSError as exc:
            raise CacheMissError(f"No cache entry for {key}: {exc}") from exc

    def write(self, key: str, data: bytes) -> None:
        """Store *data* under *key*, replacing any existing entry.

        Raises:
            CacheWriteError: If the entry cannot be written.
        """
        if not self.enabled:
            return
        try:
            atomic_write(self._path(key), data)
        except OSError as exc:
            raise CacheWriteError(f"Could not write cache entry {key}: {exc}") from exc
        debug(f"Cache write: {key} ({len(data)} bytes)")

    def delete(self, key: str) -> bool:
        """Remove a single entry. Returns ``True`` if something was removed."""
        try:
            self._path(key).unlink()
        except FileNotFoundError:
            return False
        return True

    def clear(self) -> int:
        """Remove every entry unconditionally.

        Returns:
            The number of files removed.
        """
        if not self._directory.is_dir():
            return 0
        removed = 0
        for path in self._directory.iterdir():
            if path.is_file():
                path.unlink()
                removed += 1
        debug(f"Cache cleared: {removed} entries from {self._directory}")
        return removed

    def stats(self) -> dict[str, Any]:
        """Return ``enabled``, ``directory`` and ``size`` (number of entries)."""
        size = 0
        if self._directory.is_dir():
            size = sum(
                1 for p in self._directory.iterdir()
                if p.is_file() and _KEY_PATTERN.match(p.name)
            )
        return {
            "enabled": self.enabled,
            "directory": str(self._directory),
            "size": size,
        }

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid cache key: {key!r}")
        return self._directory / key
