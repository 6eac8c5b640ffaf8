"""Exception hierarchy for restcache.

All exceptions inherit from :class:`RestCacheError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`restcache.exit_codes`.
Request outcomes are *not* exceptions: the dispatcher reports them as
:mod:`~restcache.models` result values.  The exceptions below cover the
library's own failures (configuration, cache I/O, body parsing) and the CLI,
whose top-level handler in :func:`restcache.app.main` catches
``RestCacheError`` and exits with the appropriate code.

Subclass hierarchy::

    RestCacheError (exit 1)
    +-- InvalidUsageError    (exit 2)
    +-- ConfigError          (exit 1)
    +-- CacheError           (exit 3)
    |   +-- CacheMissError   (exit 3)
    |   +-- CacheWriteError  (exit 3)
    +-- ResponseParseError   (exit 4)
    +-- RequestFailedError   (exit 5)
    +-- ConnectionError_     (exit 6)
"""

from restcache.exit_codes import (
    EXIT_CACHE_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_PARSE_ERROR,
    EXIT_REQUEST_FAILED,
)


class RestCacheError(Exception):
    """Base exception for all restcache errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(RestCacheError):
    """Raised for invalid CLI arguments or malformed ``name=value`` parameters."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(RestCacheError):
    """Raised for configuration problems (missing profiles, invalid JSON)."""

    exit_code = EXIT_GENERIC_FAILURE


class CacheError(RestCacheError):
    """Base class for response cache failures."""

    exit_code = EXIT_CACHE_ERROR


class CacheMissError(CacheError):
    """Raised by :meth:`~restcache.cache.CacheStore.read` when no entry exists."""


class CacheWriteError(CacheError):
    """Raised when a cache entry cannot be written to disk."""


class ResponseParseError(RestCacheError):
    """Raised when a body that looks like JSON fails to decode."""

    exit_code = EXIT_PARSE_ERROR


class RequestFailedError(RestCacheError):
    """CLI failure for a delivered status-code error."""

    exit_code = EXIT_REQUEST_FAILED


class ConnectionError_(RestCacheError):
    """CLI failure for a delivered transport error.

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR
