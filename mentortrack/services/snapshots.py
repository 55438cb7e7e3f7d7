"""
Snapshot cache: per-(agent, week) progress snapshots from the remote service.

Warming several keys at once goes through `warm`, which spaces the
requests `interval` seconds apart on the caller's Scheduler so the remote
service never sees a burst. The timers belong to that scheduler and are
cancelled with it.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional

from mentortrack.schemas.progress import Snapshot
from mentortrack.services.keyed_cache import WeekKey, WeekKeyedCache, week_key
from mentortrack.services.notifications import Notifier
from mentortrack.services.remote import DataSource
from mentortrack.services.scheduler import CancelToken, Scheduler

logger = logging.getLogger(__name__)

DEFAULT_STAGGER_SECONDS = 0.8


class SnapshotCache(WeekKeyedCache[Snapshot]):
    label = "progress snapshot"
    failure_notice = "Error loading progress data"

    def __init__(self, source: DataSource, notifier: Optional[Notifier] = None) -> None:
        super().__init__(notifier)
        self._source = source

    async def _fetch(self, key: WeekKey) -> Snapshot:
        return await self._source.fetch_snapshot(key.agent_id, key.week)

    def warm(
        self,
        keys: Iterable[tuple[int, int]],
        scheduler: Scheduler,
        interval: float = DEFAULT_STAGGER_SECONDS,
        force_refresh: bool = False,
        token: Optional[CancelToken] = None,
    ) -> list[asyncio.Task]:
        """Schedule one `ensure` per key, the i-th after i * interval seconds."""
        tasks = []
        for i, (agent_id, week) in enumerate(keys):
            key = week_key(agent_id, week)
            tasks.append(
                scheduler.call_later(
                    i * interval,
                    lambda k=key: self.ensure(k.agent_id, k.week, force_refresh=force_refresh, token=token),
                )
            )
        if tasks:
            logger.info(
                "Warming %d progress snapshot(s), %.2fs apart (force=%s)",
                len(tasks), interval, force_refresh,
            )
        return tasks
