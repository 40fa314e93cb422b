"""Single-Flight — collapses concurrent identical lookups into one upstream call.

Invariants:
    - At most one in-flight task per key within this process
    - Every waiter receives the same result or the same exception
    - The key is released as soon as the task finishes (no result caching here)
    - Cancelling one waiter never cancels the shared task

Design Decisions:
    - asyncio.Task + shield over a lock/condition pair: the event loop serializes
      dict access between awaits, so no extra mutex is needed
    - Scope is one process: cross-process duplicates still rely on the
      store's uniqueness constraint
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Per-key in-flight request coalescing map."""

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Task[T]] = {}

    def __len__(self) -> int:
        return len(self._inflight)

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        """Run fn once for all concurrent callers sharing key."""
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(fn())
            self._inflight[key] = task
            task.add_done_callback(lambda t, k=key: self._release(k, t))
        else:
            logger.debug(
                "Joining in-flight lookup", extra={"record_key": key},
            )
        return await asyncio.shield(task)

    def _release(self, key: str, task: asyncio.Task[T]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        # Retrieve the exception so an abandoned task doesn't warn on GC
        if not task.cancelled():
            task.exception()
