"""
Mentor comments per (agent, week).

Session-local: comments live in memory for the lifetime of the dashboard
session and are never sent to the remote service.
"""
from __future__ import annotations

from typing import Optional

from mentortrack.services.keyed_cache import WeekKey, week_key
from mentortrack.services.notifications import Notifier

MAX_COMMENT_LENGTH = 5_000


class CommentStore:
    def __init__(self, notifier: Optional[Notifier] = None) -> None:
        self._notifier = notifier or Notifier()
        self._comments: dict[WeekKey, str] = {}
        self._saved: set[WeekKey] = set()

    def get(self, agent_id: int, week: int) -> str:
        return self._comments.get(week_key(agent_id, week), "")

    def set(self, agent_id: int, week: int, text: str) -> str:
        key = week_key(agent_id, week)
        text = text[:MAX_COMMENT_LENGTH]
        self._comments[key] = text
        self._saved.discard(key)
        return text

    def save(self, agent_id: int, week: int) -> str:
        key = week_key(agent_id, week)
        self._saved.add(key)
        self._notifier.success("Comment saved successfully")
        return self._comments.get(key, "")

    def is_saved(self, agent_id: int, week: int) -> bool:
        return week_key(agent_id, week) in self._saved

    def clear(self) -> None:
        self._comments.clear()
        self._saved.clear()
