"""
Shared machinery for the per-(agent, week) caches.

A WeekKeyedCache holds one value per WeekKey and guarantees:

- single-flight: at most one live fetch per key. A second `ensure` for a
  key that is already being fetched awaits the same fetch.
- commit-time cancellation: a fetch started under a token that was
  cancelled before it resolved is dropped without touching the cache.
- invalidation wins: a fetch that was in flight when its key was
  invalidated (or the cache cleared) is dropped too, and the next
  `ensure` for that key starts a fresh fetch instead of joining it.
- failures stay local to their key. Remote errors become a per-key error
  string plus a notice; rate-limit errors are only logged.

Subclasses implement `_fetch(key)`.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Generic, NamedTuple, Optional, TypeVar

from mentortrack.core.errors import InvalidWeekError, RateLimitedError, RemoteServiceError
from mentortrack.services.notifications import Notifier
from mentortrack.services.scheduler import CancelToken

logger = logging.getLogger(__name__)

MIN_WEEK = 1
MAX_WEEK = 12

T = TypeVar("T")


class WeekKey(NamedTuple):
    agent_id: int
    week: int


def week_key(agent_id: int, week: int) -> WeekKey:
    if isinstance(week, bool) or not isinstance(week, int) or not MIN_WEEK <= week <= MAX_WEEK:
        raise InvalidWeekError(week)
    return WeekKey(agent_id, week)


class _Flight(NamedTuple):
    task: asyncio.Task
    token: CancelToken


class WeekKeyedCache(Generic[T]):
    #: noun used in log lines
    label = "data"
    #: notice shown to the user when a fetch fails
    failure_notice = "Error loading data"

    def __init__(self, notifier: Optional[Notifier] = None) -> None:
        self._notifier = notifier or Notifier()
        self._entries: dict[WeekKey, T] = {}
        self._in_flight: dict[WeekKey, _Flight] = {}
        self._errors: dict[WeekKey, str] = {}
        self._versions: dict[WeekKey, int] = {}
        self._epoch = 0

    # ------------------------------------------------------------------
    # Read-only accessors (no I/O)
    # ------------------------------------------------------------------

    def get(self, agent_id: int, week: int) -> Optional[T]:
        return self._entries.get(week_key(agent_id, week))

    def is_loading(self, agent_id: int, week: int) -> bool:
        return week_key(agent_id, week) in self._in_flight

    def error(self, agent_id: int, week: int) -> Optional[str]:
        return self._errors.get(week_key(agent_id, week))

    def keys(self) -> list[WeekKey]:
        return list(self._entries)

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def ensure(
        self,
        agent_id: int,
        week: int,
        force_refresh: bool = False,
        token: Optional[CancelToken] = None,
    ) -> Optional[T]:
        """Return the cached value, fetching it first when missing or forced.

        Never raises for remote failures: the result is None and the
        failure is recorded on the key.
        """
        key = week_key(agent_id, week)
        token = token or CancelToken()

        if key in self._entries and not force_refresh:
            logger.debug("%s %s served from cache", self.label, key)
            return self._entries[key]

        flight = self._in_flight.get(key)
        if flight is not None and not flight.token.cancelled:
            logger.debug("%s %s already in flight; joining", self.label, key)
            return await asyncio.shield(flight.task)

        task = asyncio.get_running_loop().create_task(self._load(key, token))
        self._in_flight[key] = _Flight(task, token)
        return await asyncio.shield(task)

    def invalidate(self, agent_id: int, week: int) -> None:
        key = week_key(agent_id, week)
        self._entries.pop(key, None)
        # The detached fetch still runs but can no longer be joined.
        self._in_flight.pop(key, None)
        self._versions[key] = self._versions.get(key, 0) + 1

    def clear(self) -> None:
        self._entries.clear()
        self._errors.clear()
        self._in_flight.clear()
        self._epoch += 1

    async def _fetch(self, key: WeekKey) -> T:
        raise NotImplementedError

    async def _load(self, key: WeekKey, token: CancelToken) -> Optional[T]:
        version = (self._epoch, self._versions.get(key, 0))

        def stale() -> bool:
            return token.cancelled or version != (self._epoch, self._versions.get(key, 0))

        try:
            value = await self._fetch(key)
        except RateLimitedError:
            logger.warning("Rate limited while fetching %s for %s; not retrying", self.label, key)
            if not stale():
                self._errors[key] = "rate_limited"
            return None
        except RemoteServiceError as exc:
            logger.error("Failed to fetch %s for %s: %s", self.label, key, exc.message)
            if not stale():
                self._errors[key] = exc.message
                self._notifier.error(self.failure_notice)
            return None
        finally:
            flight = self._in_flight.get(key)
            if flight is not None and flight.task is asyncio.current_task():
                del self._in_flight[key]

        if stale():
            logger.debug("Discarding stale %s for %s", self.label, key)
            return None

        self._entries[key] = value
        self._errors.pop(key, None)
        return value
