"""
Unit tests for the realtime broadcaster
"""

import pytest

from taskhub_core.broadcaster import Broadcaster, EventKind


class RecordingSubscriber:
    def __init__(self, accept=True):
        self.accept = accept
        self.messages = []

    def offer(self, message):
        self.messages.append(message)
        return self.accept


class ExplodingSubscriber:
    def offer(self, message):
        raise RuntimeError("socket gone")


class TestBroadcaster:
    """Test owner-scoped fan-out"""

    def test_notify_reaches_only_that_owner(self):
        broadcaster = Broadcaster()
        alice_a, alice_b, bob = RecordingSubscriber(), RecordingSubscriber(), RecordingSubscriber()
        broadcaster.subscribe(1, alice_a)
        broadcaster.subscribe(1, alice_b)
        broadcaster.subscribe(2, bob)

        delivered = broadcaster.notify(1, EventKind.TASK_CREATED, {"id": 7})

        assert delivered == 2
        expected = {"type": "tasks:created", "data": {"id": 7}, "id": None}
        assert alice_a.messages == [expected]
        assert alice_b.messages == [expected]
        assert bob.messages == []

    def test_notify_without_subscribers(self):
        assert Broadcaster().notify(5, EventKind.TASK_DELETED, {"id": 1}) == 0

    def test_unsubscribe_is_idempotent(self):
        broadcaster = Broadcaster()
        sub = RecordingSubscriber()
        broadcaster.subscribe(1, sub)
        broadcaster.unsubscribe(sub)
        broadcaster.unsubscribe(sub)

        assert broadcaster.notify(1, EventKind.TASK_UPDATED, {}) == 0
        assert broadcaster.subscriber_count() == 0
        assert broadcaster.subscriber_count(1) == 0

    def test_subscribe_requires_owner(self):
        with pytest.raises(ValueError):
            Broadcaster().subscribe(None, RecordingSubscriber())

    def test_resubscribe_moves_between_owners(self):
        broadcaster = Broadcaster()
        sub = RecordingSubscriber()
        broadcaster.subscribe(1, sub)
        broadcaster.subscribe(2, sub)

        assert broadcaster.subscriber_count(1) == 0
        assert broadcaster.subscriber_count(2) == 1

    def test_failing_subscriber_does_not_stop_others(self):
        broadcaster = Broadcaster()
        good = RecordingSubscriber()
        broadcaster.subscribe(1, ExplodingSubscriber())
        broadcaster.subscribe(1, good)

        assert broadcaster.notify(1, EventKind.TASK_UPDATED, {"id": 3}) == 1
        assert len(good.messages) == 1

    def test_refusing_subscriber_not_counted(self):
        broadcaster = Broadcaster()
        broadcaster.subscribe(1, RecordingSubscriber(accept=False))
        assert broadcaster.notify(1, EventKind.TASK_UPDATED, {}) == 0

    def test_event_kind_accepts_string(self):
        broadcaster = Broadcaster()
        sub = RecordingSubscriber()
        broadcaster.subscribe(1, sub)
        broadcaster.notify(1, "tasks:deleted", {"id": 9})
        assert sub.messages[0]["type"] == "tasks:deleted"
