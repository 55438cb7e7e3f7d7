"""
Cooperative scheduling for the dashboard engine.

CancelToken
    Handed to every fetch; checked once, right before a result is
    committed to a cache. A refresh or teardown cancels the token of the
    generation it supersedes so late results are dropped.

Scheduler
    Delayed coroutine calls on the running event loop. Every pending call
    is tracked so the whole group can be cancelled at once. Calls made
    with a `key` debounce: scheduling the same key again cancels the
    earlier, still-pending call.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Hashable, Optional

logger = logging.getLogger(__name__)


class CancelToken:
    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self._cancelled})"


class Scheduler:
    def __init__(self) -> None:
        self._pending: set[asyncio.Task] = set()
        self._keyed: dict[Hashable, asyncio.Task] = {}

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def has_pending(self, key: Hashable) -> bool:
        task = self._keyed.get(key)
        return task is not None and not task.done()

    def call_later(
        self,
        delay: float,
        func: Callable[[], Awaitable[object]],
        *,
        key: Optional[Hashable] = None,
    ) -> asyncio.Task:
        """Run `func()` after `delay` seconds. Must be called inside the loop."""
        if key is not None:
            self.cancel(key)

        task = asyncio.get_running_loop().create_task(self._run(delay, func))
        self._pending.add(task)
        if key is not None:
            self._keyed[key] = task
        task.add_done_callback(lambda t, k=key: self._finished(t, k))
        return task

    def cancel(self, key: Hashable) -> bool:
        task = self._keyed.pop(key, None)
        if task is None or task.done():
            return False
        task.cancel()
        return True

    def cancel_all(self) -> int:
        cancelled = 0
        for task in list(self._pending):
            if not task.done():
                task.cancel()
                cancelled += 1
        self._pending.clear()
        self._keyed.clear()
        if cancelled:
            logger.debug("Cancelled %d pending scheduled call(s)", cancelled)
        return cancelled

    async def join(self) -> None:
        """Wait until nothing is pending, including calls scheduled meanwhile."""
        while True:
            waiting = [t for t in self._pending if not t.done()]
            if not waiting:
                return
            await asyncio.gather(*waiting, return_exceptions=True)

    @staticmethod
    async def _run(delay: float, func: Callable[[], Awaitable[object]]) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        await func()

    def _finished(self, task: asyncio.Task, key: Optional[Hashable]) -> None:
        self._pending.discard(task)
        if key is not None and self._keyed.get(key) is task:
            del self._keyed[key]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Scheduled call failed", exc_info=exc)
