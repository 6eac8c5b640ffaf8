"""Cache policy coordination.

:class:`PolicyCoordinator` sits between the API facade, the
:class:`~restcache.cache.CacheStore`, and the
:class:`~restcache.client.dispatcher.Dispatcher`.  For each call it:

1. Looks up the cache when the policy reads it (``CACHE_THEN_NETWORK``,
   ``CACHE_ELSE_NETWORK``) and delivers a hit immediately.
2. Decides whether to hit the network.  Only ``CACHE_ELSE_NETWORK`` with a
   hit skips it.
3. Persists a successful network body when the policy writes the cache
   (every policy except ``IGNORE_CACHE``).
4. Delivers the network result unless the policy is ``UPDATE_CACHE``.

Only GET requests take part in steps 1 and 3.  Cache failures are reported
through :mod:`restcache.output` and otherwise ignored: a broken entry counts
as a miss and a failed write does not affect the delivered result.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from restcache.cache import CacheStore
from restcache.client.dispatcher import Dispatcher
from restcache.client.handle import RequestHandle
from restcache.client.response import parse_body
from restcache.exceptions import CacheError, ResponseParseError
from restcache.models import CachePolicy, Request, Result, Success
from restcache.output import debug, warning

Deliver = Callable[[Result], None]


def _report_failure(task: asyncio.Task[None]) -> None:
    # Retrieving the exception marks it handled; an awaited handle still re-raises it.
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        warning(f"Result callback failed in {task.get_name()}: {exc!r}")


class PolicyCoordinator:
    """Runs a request under a :class:`~restcache.models.CachePolicy`.

    Args:
        dispatcher: Executes network requests.
        store: Response cache.  ``None`` disables caching entirely.
    """

    def __init__(self, dispatcher: Dispatcher, store: Optional[CacheStore] = None) -> None:
        self._dispatcher = dispatcher
        self._store = store

    @property
    def store(self) -> Optional[CacheStore]:
        return self._store

    def start(
        self,
        request: Request,
        policy: CachePolicy,
        deliver: Optional[Deliver] = None,
    ) -> RequestHandle:
        """Begin executing *request* and return its handle.

        A cache hit is delivered before this method returns.  The network
        request, if needed, runs as a task on the current event loop and
        delivers its result when it completes.

        Must be called from within a running event loop.
        """
        handle = RequestHandle(request, policy)

        cached = self.lookup(request, policy)
        if cached is not None:
            self._deliver(handle, cached, deliver)
            if policy is CachePolicy.CACHE_ELSE_NETWORK:
                return handle

        task = asyncio.create_task(
            self._complete(handle, deliver),
            name=f"restcache {request.method.value} {request.url}",
        )
        task.add_done_callback(_report_failure)
        handle._attach(task)
        return handle

    async def execute(
        self,
        request: Request,
        policy: CachePolicy,
        deliver: Optional[Deliver] = None,
    ) -> Optional[Result]:
        """Run *request* to completion and return the last delivered result."""
        return await self.start(request, policy, deliver)

    def lookup(self, request: Request, policy: CachePolicy) -> Optional[Success]:
        """Return the cached result for *request*, or ``None`` on a miss.

        Returns ``None`` without touching the store for non-GET requests and
        for policies that do not read the cache.
        """
        if self._store is None or not request.is_cacheable or not policy.reads_cache:
            return None

        key = self._store.key_for(request)
        if not self._store.exists(key):
            debug(f"Cache miss: {request.url} ({key})")
            return None

        try:
            raw = self._store.read(key).decode("utf-8")
            data = parse_body(raw)
        except (CacheError, UnicodeDecodeError) as exc:
            warning(f"Ignoring unreadable cache entry {key}: {exc}")
            return None
        except ResponseParseError as exc:
            warning(f"Ignoring corrupt cache entry {key}: {exc}")
            return None

        debug(f"Cache hit: {request.url} ({key})")
        return Success(data=data, raw=raw, from_cache=True)

    def persist(self, request: Request, policy: CachePolicy, result: Result) -> bool:
        """Store a successful GET body if *policy* allows it.

        Returns ``True`` if an entry was written.
        """
        if self._store is None or not request.is_cacheable or not policy.writes_cache:
            return False
        if not isinstance(result, Success) or not result.raw:
            return False

        key = self._store.key_for(request)
        try:
            self._store.write(key, result.raw.strip().encode("utf-8"))
        except CacheError as exc:
            warning(str(exc))
            return False
        return True

    async def _complete(self, handle: RequestHandle, deliver: Optional[Deliver]) -> None:
        result = await self._dispatcher.dispatch(handle.request)
        self.persist(handle.request, handle.policy, result)
        if handle.cancelled:
            debug(f"Dropping result for cancelled request {handle.request.url}")
            return
        self._deliver(handle, result, deliver)

    @staticmethod
    def _deliver(handle: RequestHandle, result: Result, deliver: Optional[Deliver]) -> None:
        if not handle.policy.delivers:
            return
        handle._record(result)
        if deliver is not None:
            deliver(result)
