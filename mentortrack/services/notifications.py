"""
User-facing notices ("toasts").

The engine queues them; the rendering layer drains and shows them.
Rate-limit failures never produce a notice.
"""
from __future__ import annotations

import enum
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone

MAX_QUEUED = 50


class NoticeLevel(str, enum.Enum):
    success = "success"
    error = "error"


@dataclass
class Notice:
    level: NoticeLevel
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))


class Notifier:
    def __init__(self, max_queued: int = MAX_QUEUED) -> None:
        self._queue: deque[Notice] = deque(maxlen=max_queued)

    def success(self, message: str) -> None:
        self._queue.append(Notice(NoticeLevel.success, message))

    def error(self, message: str) -> None:
        self._queue.append(Notice(NoticeLevel.error, message))

    def peek(self) -> list[Notice]:
        return list(self._queue)

    def drain(self) -> list[Notice]:
        items = list(self._queue)
        self._queue.clear()
        return items
