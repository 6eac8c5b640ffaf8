"""Per-call request handles."""

from __future__ import annotations

import asyncio
from typing import Any, Generator, Optional

from restcache.models import CachePolicy, Request, Result


class RequestHandle:
    """Tracks one call made through :class:`~restcache.client.api.ApiClient`.

    A handle collects every result delivered for its request -- zero, one,
    or (under ``CACHE_THEN_NETWORK``) two -- and owns the network task, if
    one was started.  Awaiting the handle waits for the network task and
    returns the last delivered result, or ``None`` when nothing was delivered
    (``UPDATE_CACHE``, or a cancelled request).

    Example::

        handle = api.get("/items")
        result = await handle
        handle.results   # [Success(from_cache=True, ...), Success(...)]
    """

    def __init__(self, request: Request, policy: CachePolicy) -> None:
        self.request = request
        self.policy = policy
        self._results: list[Result] = []
        self._task: Optional[asyncio.Task[Any]] = None
        self._cancelled = False

    def __repr__(self) -> str:
        return (
            f"<RequestHandle {self.request.method.value} {self.request.url} "
            f"policy={self.policy.value} results={len(self._results)}>"
        )

    @property
    def results(self) -> list[Result]:
        return list(self._results)

    @property
    def last_result(self) -> Optional[Result]:
        return self._results[-1] if self._results else None

    @property
    def dispatched(self) -> bool:
        """Whether a network request was started for this call."""
        return self._task is not None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def done(self) -> bool:
        return self._task is None or self._task.done()

    def cancel(self) -> bool:
        """Cancel the in-flight network request.

        Returns ``True`` if a running task was cancelled.  Results already
        delivered (a cache hit) are kept; no further result is delivered.
        """
        self._cancelled = True
        if self._task is not None and not self._task.done():
            return self._task.cancel()
        return False

    async def wait(self) -> Optional[Result]:
        """Wait for the network task (if any) and return the last delivered result.

        Exceptions raised by result callbacks inside the task propagate here.
        """
        if self._task is not None:
            await asyncio.wait({self._task})
            if not self._task.cancelled():
                exc = self._task.exception()
                if exc is not None:
                    raise exc
        return self.last_result

    def __await__(self) -> Generator[Any, None, Optional[Result]]:
        return self.wait().__await__()

    # Used by the coordinator.

    def _attach(self, task: asyncio.Task[Any]) -> None:
        self._task = task

    def _record(self, result: Result) -> None:
        self._results.append(result)
