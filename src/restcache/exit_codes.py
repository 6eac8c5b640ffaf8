"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~restcache.exceptions.RestCacheError` subclass.
Shell wrappers can inspect the exit code to tell a failed request apart from
a broken cache directory without parsing stderr.

Example::

    $ restcache request GET /items
    $ echo $?
    5   # EXIT_REQUEST_FAILED -- the server answered with a non-2xx status
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_CACHE_ERROR = 3
"""The response cache could not be read or written."""

EXIT_PARSE_ERROR = 4
"""A response body could not be parsed."""

EXIT_REQUEST_FAILED = 5
"""The request finished with a status-code error."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
