"""
Target cache: per-(agent, week) target sets and target writes.

Reads and writes take a catalog position; translation to the remote id
happens here, through services/metric_ids.py, and nowhere else.

A successful write invalidates the whole TargetSet for its key instead of
patching it, so the next read reflects what the server stored.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from mentortrack.core.errors import InvalidTargetValueError, RemoteServiceError, RateLimitedError
from mentortrack.schemas.catalog import MetricKind
from mentortrack.schemas.target import TargetSet, TargetUpdate
from mentortrack.services.keyed_cache import WeekKey, WeekKeyedCache, week_key
from mentortrack.services.metric_ids import to_absolute_id
from mentortrack.services.notifications import Notifier
from mentortrack.services.remote import DataSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TargetWrite:
    """Outcome of one target write. Truthy when the remote accepted it."""

    ok: bool
    error: Optional[str] = None
    rate_limited: bool = False

    def __bool__(self) -> bool:
        return self.ok


class TargetCache(WeekKeyedCache[TargetSet]):
    label = "target set"
    failure_notice = "Error loading targets"

    def __init__(
        self,
        source: DataSource,
        mentor_id: Callable[[], Optional[int]],
        notifier: Optional[Notifier] = None,
    ) -> None:
        super().__init__(notifier)
        self._source = source
        self._mentor_id = mentor_id

    async def _fetch(self, key: WeekKey) -> TargetSet:
        return await self._source.fetch_target_set(key.agent_id, key.week)

    def lookup(self, kind: MetricKind, position: int, agent_id: int, week: int) -> int:
        """Current target for a catalog position; 0 when unset or not loaded."""
        targets = self.get(agent_id, week)
        if targets is None:
            return 0
        return targets.count_for(kind, to_absolute_id(kind, position))

    async def update(
        self,
        agent_id: int,
        week: int,
        kind: MetricKind,
        position: int,
        new_count: int,
    ) -> TargetWrite:
        """Write one target and report how it went."""
        key = week_key(agent_id, week)
        if isinstance(new_count, bool) or not isinstance(new_count, int) or new_count < 0:
            raise InvalidTargetValueError(new_count)

        mentor_id = self._mentor_id()
        if mentor_id is None:
            logger.error("Cannot write target for %s: mentor id unknown (roster not loaded)", key)
            return TargetWrite(ok=False, error="mentor id unknown")

        update = TargetUpdate(
            mentor_id=mentor_id,
            agent_id=agent_id,
            week=week,
            kind=kind,
            absolute_id=to_absolute_id(kind, position),
            target_count=new_count,
        )
        try:
            await self._source.submit_target_update(update)
        except RateLimitedError:
            logger.warning("Rate limited while writing %s target for %s", kind.value, key)
            return TargetWrite(ok=False, error="rate_limited", rate_limited=True)
        except RemoteServiceError as exc:
            logger.error("Target write for %s failed: %s", key, exc.message)
            return TargetWrite(ok=False, error=exc.message)

        logger.info(
            "Target set: agent=%s week=%s %s#%s (remote id %s) -> %s",
            agent_id, week, kind.value, position, update.absolute_id, new_count,
        )
        self.invalidate(agent_id, week)
        return TargetWrite(ok=True)
