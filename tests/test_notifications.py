"""
Tests for the notice queue.
"""
from mentortrack.services.notifications import NoticeLevel, Notifier


class TestNotifier:
    def test_levels(self):
        assert [level.value for level in NoticeLevel] == ["success", "error"]

    def test_drain_empties_queue(self):
        notifier = Notifier()
        notifier.success("Saved")
        notifier.error("Failed")
        assert [(n.level, n.message) for n in notifier.peek()] == [
            (NoticeLevel.success, "Saved"),
            (NoticeLevel.error, "Failed"),
        ]
        assert len(notifier.drain()) == 2
        assert notifier.drain() == []

    def test_oldest_dropped_when_full(self):
        notifier = Notifier(max_queued=2)
        for message in ("one", "two", "three"):
            notifier.success(message)
        assert [n.message for n in notifier.drain()] == ["two", "three"]
