"""Cache key derivation.

A key is the SHA-1 hex digest of the endpoint URL followed by every
parameter as ``name=value&`` (both URL-encoded), in the order the caller
added them.  Parameters are deliberately *not* sorted: ``a=1&b=2`` and
``b=2&a=1`` address different entries.

Encoding is :func:`urllib.parse.quote_plus`, which matches the Java
``URLEncoder`` form encoding (space as ``+``, UTF-8 percent escapes) except
for two characters: ``*`` becomes ``%2A`` here but stays literal in Java,
and ``~`` stays literal here but becomes ``%7E`` in Java.  Keys for values
containing either character differ from keys built with ``URLEncoder``,
so a cache directory shared with a Java client misses on those entries.
"""

from __future__ import annotations

import hashlib
from typing import Iterable
from urllib.parse import quote_plus

from restcache.models import Request


def canonical_query(url: str, params: Iterable[tuple[str, str]]) -> str:
    """Return the string that gets hashed for *url* and *params*.

    Example::

        >>> canonical_query("https://api.example.com/items", [("id", "42")])
        'https://api.example.com/itemsid=42&'
    """
    parts = [url]
    for name, value in params:
        parts.append(f"{quote_plus(name)}={quote_plus(value)}&")
    return "".join(parts)


def cache_key(url: str, params: Iterable[tuple[str, str]] = ()) -> str:
    """Return the 40-character hex cache key for an endpoint and parameter list."""
    raw = canonical_query(url, params)
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()


def key_for_request(request: Request) -> str:
    return cache_key(request.url, request.params)
