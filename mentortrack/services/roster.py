"""
Agent roster cache: the mentor's sales agents plus the week each agent's
row currently shows.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from mentortrack.core.errors import RateLimitedError, RemoteServiceError, UnknownAgentError
from mentortrack.schemas.agent import Agent, Roster
from mentortrack.services.keyed_cache import MIN_WEEK, week_key
from mentortrack.services.notifications import Notifier
from mentortrack.services.remote import DataSource
from mentortrack.services.scheduler import CancelToken

logger = logging.getLogger(__name__)

LOAD_ERROR = "Failed to load sales data. Please try again later."


class RosterCache:
    def __init__(self, source: DataSource, notifier: Optional[Notifier] = None) -> None:
        self._source = source
        self._notifier = notifier or Notifier()
        self._agents: list[Agent] = []
        self._loaded = False
        self._pending: Optional[asyncio.Task] = None
        self._pending_token = CancelToken()
        self.mentor_id: Optional[int] = None
        self.error: Optional[str] = None
        self.selected_weeks: dict[int, int] = {}

    @property
    def agents(self) -> list[Agent]:
        return list(self._agents)

    @property
    def is_loading(self) -> bool:
        return self._pending is not None

    @property
    def loaded(self) -> bool:
        return self._loaded

    def find(self, agent_id: int) -> Agent:
        for agent in self._agents:
            if agent.id == agent_id:
                return agent
        raise UnknownAgentError(agent_id)

    def selected_week(self, agent_id: int) -> int:
        return self.selected_weeks.get(agent_id, MIN_WEEK)

    def select_week(self, agent_id: int, week: int) -> None:
        self.find(agent_id)
        week_key(agent_id, week)
        self.selected_weeks[agent_id] = week

    async def load(
        self,
        force_refresh: bool = False,
        token: Optional[CancelToken] = None,
    ) -> list[Agent]:
        if self._loaded and not force_refresh:
            return self.agents
        if self._pending is None or self._pending_token.cancelled:
            self._pending_token = token or CancelToken()
            self._pending = asyncio.get_running_loop().create_task(self._load(self._pending_token))
        return await asyncio.shield(self._pending)

    def clear(self) -> None:
        self._agents = []
        self._loaded = False
        self.mentor_id = None
        self.error = None
        self.selected_weeks.clear()

    async def _load(self, token: CancelToken) -> list[Agent]:
        try:
            roster: Roster = await self._source.fetch_roster()
        except RateLimitedError:
            logger.warning("Rate limited while loading the agent roster")
            if not token.cancelled:
                self.error = LOAD_ERROR
            return self.agents
        except RemoteServiceError as exc:
            logger.error("Failed to load agent roster: %s", exc.message)
            if not token.cancelled:
                self.error = LOAD_ERROR
                self._notifier.error("Error loading sales data")
            return self.agents
        finally:
            if self._pending is asyncio.current_task():
                self._pending = None

        if token.cancelled:
            logger.debug("Discarding superseded roster load")
            return self.agents

        self._agents = list(roster.agents)
        self.mentor_id = roster.mentor_id
        self._loaded = True
        self.error = None
        for agent in self._agents:
            self.selected_weeks.setdefault(agent.id, MIN_WEEK)
        logger.info("Roster loaded: %d agent(s) for mentor %s", len(self._agents), self.mentor_id)
        return self.agents
