"""
MentorDashboard, the view coordinator.

Owns one dashboard session: the four caches, the comment store, the
notice queue and the scheduler. It decides which (agent, week) pairs are
active and asks the caches for them; rendering reads `week_view` which
never performs I/O.

Generations
-----------
Every fetch is started under the current CancelToken. `refresh_all` and
`close` cancel that token together with every pending timer, so results
and timers of a superseded generation can no longer touch the caches.

Timers
------
  expand       debounce before loading an expanded row   (default 300 ms)
  week change  delay before loading a newly selected week (default 500 ms)
  stagger      spacing between bulk snapshot fetches      (default 800 ms)
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from mentortrack.core.config import Settings
from mentortrack.core.errors import (
    CatalogNotLoadedError,
    DashboardClosedError,
    InvalidTargetValueError,
    NoTargetSelectedError,
    TargetEditorClosedError,
)
from mentortrack.schemas.agent import Agent
from mentortrack.schemas.catalog import Catalog, MetricKind
from mentortrack.schemas.progress import Snapshot
from mentortrack.schemas.target import TargetSet
from mentortrack.services.catalog import CatalogCache
from mentortrack.services.comments import CommentStore
from mentortrack.services.keyed_cache import WeekKey, week_key
from mentortrack.services.notifications import Notice, Notifier
from mentortrack.services.progress import MetricProgress, WeeklyProgress, metric_rows, weekly_progress
from mentortrack.services.remote import DataSource
from mentortrack.services.roster import RosterCache
from mentortrack.services.scheduler import CancelToken, Scheduler
from mentortrack.services.snapshots import SnapshotCache
from mentortrack.services.targets import TargetCache

logger = logging.getLogger(__name__)

_EXPAND_KEY = "expand"


# ---------------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DashboardTimings:
    """Delays in seconds."""
    snapshot_stagger: float = 0.8
    expand_debounce: float = 0.3
    week_change_delay: float = 0.5

    @classmethod
    def from_settings(cls, s: Settings) -> "DashboardTimings":
        return cls(
            snapshot_stagger=s.SNAPSHOT_STAGGER_MS / 1000,
            expand_debounce=s.EXPAND_DEBOUNCE_MS / 1000,
            week_change_delay=s.WEEK_CHANGE_DELAY_MS / 1000,
        )


@dataclass
class TargetDraft:
    kind: MetricKind
    position: int
    name: str
    current_target: int
    new_target: int


@dataclass
class TargetEditor:
    agent_id: int
    week: int
    category: MetricKind = MetricKind.action
    selected: Optional[TargetDraft] = None
    saving: bool = False
    last_error: Optional[str] = None


@dataclass
class WeekView:
    agent_id: int
    week: int
    snapshot: Optional[Snapshot]
    targets: Optional[TargetSet]
    progress: WeeklyProgress
    rows: dict[MetricKind, list[MetricProgress]] = field(default_factory=dict)
    snapshot_loading: bool = False
    targets_loading: bool = False
    snapshot_error: Optional[str] = None
    targets_error: Optional[str] = None
    comment: str = ""


# ---------------------------------------------------------------------------
# Coordinator
# ---------------------------------------------------------------------------

class MentorDashboard:
    def __init__(
        self,
        source: DataSource,
        timings: Optional[DashboardTimings] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.timings = timings or DashboardTimings()
        self.notices = notifier or Notifier()
        self.scheduler = Scheduler()
        self.catalog = CatalogCache(source, self.notices)
        self.roster = RosterCache(source, self.notices)
        self.snapshots = SnapshotCache(source, self.notices)
        self.targets = TargetCache(source, lambda: self.roster.mentor_id, self.notices)
        self.comments = CommentStore(self.notices)
        self.expanded_agent_id: Optional[int] = None
        self.editor: Optional[TargetEditor] = None
        self._token = CancelToken()
        self._closed = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Load roster and catalog, then warm every agent's selected week."""
        self._require_open()
        token = self._token
        await asyncio.gather(
            self.roster.load(token=token),
            self.catalog.load(token=token),
        )
        if token.cancelled:
            return
        self._warm_selected_weeks(force_refresh=False, token=token)

    async def refresh_all(self) -> None:
        self._require_open()
        token = self._new_generation()
        logger.info("Refreshing dashboard data")
        await asyncio.gather(
            self.roster.load(force_refresh=True, token=token),
            self.catalog.load(force_refresh=True, token=token),
        )
        if token.cancelled:
            return
        self._warm_selected_weeks(force_refresh=True, token=token)
        if self.expanded_agent_id is not None:
            week = self.roster.selected_week(self.expanded_agent_id)
            agent_id = self.expanded_agent_id
            self.scheduler.call_later(
                0,
                lambda: self.targets.ensure(agent_id, week, force_refresh=True, token=token),
            )
        self.notices.success("Data refreshed successfully")

    async def close(self) -> None:
        """Tear the session down: stop timers, drop late results, clear caches."""
        self._closed = True
        self._token.cancel()
        self.scheduler.cancel_all()
        self.snapshots.clear()
        self.targets.clear()
        self.catalog.clear()
        self.roster.clear()
        self.comments.clear()
        self.editor = None
        self.expanded_agent_id = None
        logger.info("Dashboard session closed")

    @property
    def closed(self) -> bool:
        return self._closed

    def _require_open(self) -> None:
        if self._closed:
            raise DashboardClosedError()

    def _new_generation(self) -> CancelToken:
        self._token.cancel()
        self.scheduler.cancel_all()
        self._token = CancelToken()
        return self._token

    def _warm_selected_weeks(self, force_refresh: bool, token: CancelToken) -> None:
        keys = [(a.id, self.roster.selected_week(a.id)) for a in self.roster.agents]
        self.snapshots.warm(
            keys,
            self.scheduler,
            interval=self.timings.snapshot_stagger,
            force_refresh=force_refresh,
            token=token,
        )

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def select_week(self, agent_id: int, week: int) -> None:
        """Show `week` in the agent's row; loads it after a short delay."""
        self._require_open()
        self.roster.select_week(agent_id, week)
        token = self._token
        load_targets = self.expanded_agent_id == agent_id

        async def _load() -> None:
            await asyncio.gather(
                self.snapshots.ensure(agent_id, week, token=token),
                self._maybe_ensure_targets(load_targets, agent_id, week, token),
            )

        self.scheduler.call_later(self.timings.week_change_delay, _load, key=("week", agent_id))

    def expand_agent(self, agent_id: int) -> None:
        self._require_open()
        self.roster.find(agent_id)
        self.expanded_agent_id = agent_id
        token = self._token

        async def _load() -> None:
            # Read the week when the debounce fires, not when it was armed.
            week = self.roster.selected_week(agent_id)
            await asyncio.gather(
                self.targets.ensure(agent_id, week, token=token),
                self.snapshots.ensure(agent_id, week, token=token),
            )

        self.scheduler.call_later(self.timings.expand_debounce, _load, key=_EXPAND_KEY)

    def collapse_agent(self) -> None:
        self.expanded_agent_id = None
        self.scheduler.cancel(_EXPAND_KEY)

    async def load_week(self, agent_id: int, week: int) -> WeekView:
        """Fetch (if needed) and return one WeekKey without any delay."""
        self._require_open()
        self.roster.find(agent_id)
        await asyncio.gather(
            self.snapshots.ensure(agent_id, week, token=self._token),
            self.targets.ensure(agent_id, week, token=self._token),
        )
        return self.week_view(agent_id, week)

    async def _maybe_ensure_targets(
        self, wanted: bool, agent_id: int, week: int, token: CancelToken
    ) -> Optional[TargetSet]:
        if not wanted:
            return None
        return await self.targets.ensure(agent_id, week, token=token)

    # ------------------------------------------------------------------
    # Target editor
    # ------------------------------------------------------------------

    async def open_target_editor(self, agent_id: int, week: int) -> TargetEditor:
        self._require_open()
        self.roster.find(agent_id)
        week_key(agent_id, week)
        self.editor = TargetEditor(agent_id=agent_id, week=week)
        await self.targets.ensure(agent_id, week, token=self._token)
        return self.editor

    def close_target_editor(self) -> None:
        self.editor = None

    def select_target_metric(self, kind: MetricKind, position: int) -> TargetDraft:
        editor = self._require_editor()
        catalog = self._require_catalog()
        entry = catalog.entry(kind, position)
        current = self.targets.lookup(kind, position, editor.agent_id, editor.week)
        editor.category = kind
        editor.selected = TargetDraft(
            kind=kind,
            position=position,
            name=entry.name,
            current_target=current,
            new_target=current,
        )
        return editor.selected

    def set_target_draft_value(self, value: Union[int, str]) -> int:
        editor = self._require_editor()
        if editor.selected is None:
            raise NoTargetSelectedError()
        editor.selected.new_target = _parse_target(value)
        return editor.selected.new_target

    async def save_target(self) -> bool:
        editor = self._require_editor()
        draft = editor.selected
        if draft is None:
            raise NoTargetSelectedError()

        editor.saving = True
        try:
            result = await self.targets.update(
                editor.agent_id, editor.week, draft.kind, draft.position, draft.new_target
            )
        finally:
            editor.saving = False

        if not result.ok:
            editor.last_error = result.error
            if not result.rate_limited:
                self.notices.error("Failed to save target")
            return False

        editor.last_error = None
        editor.selected = None
        self.notices.success(f"Target for {draft.name} set to {draft.new_target}")
        await self.targets.ensure(editor.agent_id, editor.week, token=self._token)
        return True

    def _require_editor(self) -> TargetEditor:
        if self.editor is None:
            raise TargetEditorClosedError()
        return self.editor

    def _require_catalog(self) -> Catalog:
        catalog = self.catalog.get()
        if catalog is None:
            raise CatalogNotLoadedError()
        return catalog

    # ------------------------------------------------------------------
    # Comments (session-local)
    # ------------------------------------------------------------------

    def comment(self, agent_id: int, week: int) -> str:
        return self.comments.get(agent_id, week)

    def set_comment(self, agent_id: int, week: int, text: str) -> str:
        self.roster.find(agent_id)
        return self.comments.set(agent_id, week, text)

    def save_comment(self, agent_id: int, week: int) -> str:
        self.roster.find(agent_id)
        return self.comments.save(agent_id, week)

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------

    @property
    def agents(self) -> list[Agent]:
        return self.roster.agents

    def week_view(self, agent_id: int, week: int) -> WeekView:
        key: WeekKey = week_key(agent_id, week)
        catalog = self.catalog.get()
        snapshot = self.snapshots.get(*key)
        targets = self.targets.get(*key)
        return WeekView(
            agent_id=agent_id,
            week=week,
            snapshot=snapshot,
            targets=targets,
            progress=weekly_progress(catalog, snapshot, targets),
            rows={kind: metric_rows(kind, catalog, snapshot, targets) for kind in MetricKind},
            snapshot_loading=self.snapshots.is_loading(*key),
            targets_loading=self.targets.is_loading(*key),
            snapshot_error=self.snapshots.error(*key),
            targets_error=self.targets.error(*key),
            comment=self.comments.get(*key),
        )

    def drain_notices(self) -> list[Notice]:
        return self.notices.drain()


def _parse_target(value: Union[int, str]) -> int:
    """Integers pass through; text that is not a number reads as 0."""
    if isinstance(value, bool):
        raise InvalidTargetValueError(value)
    if isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError:
            return 0
    if not isinstance(value, int) or value < 0:
        raise InvalidTargetValueError(value)
    return value
