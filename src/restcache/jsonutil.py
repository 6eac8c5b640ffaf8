"""Helpers for working with decoded JSON arrays of objects.

These operate on the ``list[dict]`` values a :class:`~restcache.models.Success`
typically carries: picking an object by key, swapping an updated object into
a list, matching objects against a filter, and projecting objects to rows
with a fixed column order (``_id`` first-class, as list views expect).
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

ID_COLUMN = "_id"

_MISSING = object()


def find_object(items: Sequence[dict[str, Any]], key: str, value: Any) -> Optional[dict[str, Any]]:
    """Return the first object whose *key* equals *value*.

    When nothing matches, the last object inspected is returned (``None`` for
    an empty list), so callers that always expect an object still get one.
    """
    found: Optional[dict[str, Any]] = None
    for item in items:
        found = item
        if item.get(key) == value:
            return item
    return found


def replace_object(
    items: Sequence[dict[str, Any]],
    obj: dict[str, Any],
    id_key: str,
) -> list[dict[str, Any]]:
    """Return a new list with every object sharing *obj*'s ``id_key`` replaced by *obj*."""
    target = obj.get(id_key)
    return [obj if item.get(id_key) == target else item for item in items]


def _parent(obj: dict[str, Any], dotted_key: str) -> tuple[Optional[dict[str, Any]], str]:
    """Walk all but the last segment of *dotted_key*; ``None`` if a step is missing or not an object."""
    *path, leaf = dotted_key.split(".")
    current: Any = obj
    for part in path:
        current = current.get(part)
        if not isinstance(current, dict):
            return None, leaf
    return current, leaf


def matches_filter(obj: dict[str, Any], filter: Optional[dict[str, Any]]) -> bool:
    """Return ``True`` if *obj* satisfies every entry of *filter*.

    - ``"a.b.c"`` keys walk nested objects.  A missing or null ``a`` or ``b``
      fails; a missing ``c`` passes, a present one must equal the filter value.
    - A plain key must be present.  When its value is a list the filter value
      must be a member, otherwise the values must be equal.

    An empty or ``None`` filter matches everything.
    """
    if not filter:
        return True
    for key, expected in filter.items():
        if "." in key:
            parent, leaf = _parent(obj, key)
            if parent is None:
                return False
            if leaf in parent and parent[leaf] != expected:
                return False
            continue
        actual = obj.get(key, _MISSING)
        if actual is _MISSING:
            return False
        if isinstance(actual, list):
            if expected not in actual:
                return False
        elif actual != expected:
            return False
    return True


def to_rows(
    items: Optional[Sequence[dict[str, Any]]],
    keys: Sequence[str],
    id_key: str,
    filter: Optional[dict[str, Any]] = None,
) -> tuple[list[str], list[tuple[Any, ...]]]:
    """Project *items* to rows with one column per key.

    The first key matching *id_key* (case-insensitively) is renamed to
    ``_id`` in the returned column list.  Missing and null values become
    ``None``.  Objects failing *filter* are skipped.

    Returns:
        A ``(columns, rows)`` tuple.

    Example::

        >>> to_rows([{"id": 1, "name": "a"}], ["id", "name"], "id")
        (['_id', 'name'], [(1, 'a')])
    """
    columns = list(keys)
    for i, key in enumerate(columns):
        if key.lower() == id_key.lower():
            columns[i] = ID_COLUMN
            break

    rows: list[tuple[Any, ...]] = []
    for item in items or ():
        if matches_filter(item, filter):
            rows.append(tuple(item.get(key) for key in keys))
    return columns, rows
