"""Disk-based response caching for restcache.

This package provides :class:`CacheStore`, a flat directory of raw response
bodies keyed by :func:`cache_key`.  It is consulted and updated by
:class:`~restcache.client.coordinator.PolicyCoordinator` according to the
request's :class:`~restcache.models.CachePolicy`.
"""

from restcache.cache.keys import cache_key, canonical_query, key_for_request
from restcache.cache.store import CacheStore

__all__ = ["CacheStore", "cache_key", "canonical_query", "key_for_request"]
