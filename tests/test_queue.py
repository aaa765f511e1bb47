"""Tests for the event queue's FIFO and drain bookkeeping."""

from taskhooks.models import DomainEvent
from taskhooks.webhooks import EventQueue


def make_event(event_type: str = "task.created") -> DomainEvent:
    return DomainEvent(type=event_type, data={"project_id": "p1"})


class TestEventQueue:
    """Tests for EventQueue."""

    def test_first_enqueue_starts_drain(self):
        queue = EventQueue()

        assert queue.enqueue(make_event()) is True
        assert queue.is_draining

    def test_enqueue_while_draining_does_not_start_another(self):
        queue = EventQueue()
        queue.enqueue(make_event())

        assert queue.enqueue(make_event()) is False
        assert queue.enqueue(make_event()) is False
        assert len(queue) == 3

    def test_fifo_order(self):
        queue = EventQueue()
        events = [make_event(t) for t in ("a.one", "b.two", "c.three")]
        for event in events:
            queue.enqueue(event)

        popped = [queue.pop(), queue.pop(), queue.pop()]

        assert popped == events
        assert queue.pop() is None

    def test_finish_drain_returns_to_idle(self):
        queue = EventQueue()
        queue.enqueue(make_event())
        queue.pop()
        queue.finish_drain()

        assert not queue.is_draining
        assert queue.enqueue(make_event()) is True
