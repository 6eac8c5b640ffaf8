"""Response body parsing.

:func:`parse_body` turns raw body text into the value delivered in a
:class:`~restcache.models.Success`.  The network path and the cache path
both go through it, and a cache entry stores only the body, so the rule
depends on the body alone: a trimmed body starting with ``{`` or ``[`` is
decoded as JSON, every other body is delivered as the trimmed string.  The
``Content-Type`` header is not consulted; a scalar body such as ``42`` is
the string ``"42"`` whether it came from the network or the cache.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from restcache.exceptions import ResponseParseError


def looks_like_json(text: str) -> bool:
    return text[:1] in ("{", "[")


def parse_body(text: Optional[str]) -> Any:
    """Parse a response body.

    Args:
        text: Raw body text.  ``None`` and blank bodies parse to ``None``.

    Returns:
        A ``dict`` or ``list`` for JSON bodies, otherwise the trimmed body.

    Raises:
        ResponseParseError: If a body starting with ``{`` or ``[`` is
            malformed.
    """
    if text is None:
        return None
    stripped = text.strip()
    if not stripped:
        return None

    if looks_like_json(stripped):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError as exc:
            raise ResponseParseError(f"Invalid JSON in response body: {exc}") from exc

    return stripped
