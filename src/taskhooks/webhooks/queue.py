"""FIFO buffer of domain events awaiting dispatch.

The queue carries a single idle/draining flag instead of a lock. Enqueueing
never waits: it appends and tells the caller whether a drain must be
started. All state changes happen synchronously between awaits, so on one
event loop at most one drain runs at a time.
"""

from __future__ import annotations

from collections import deque

from taskhooks.models import DomainEvent


class EventQueue:
    """Ordered event buffer with single-flight drain bookkeeping."""

    def __init__(self) -> None:
        self._events: deque[DomainEvent] = deque()
        self._draining = False

    def __len__(self) -> int:
        return len(self._events)

    @property
    def is_draining(self) -> bool:
        return self._draining

    def enqueue(self, event: DomainEvent) -> bool:
        """Append an event to the tail.

        Returns:
            True if the queue was idle and the caller must start a drain.
        """
        self._events.append(event)
        if self._draining:
            return False
        self._draining = True
        return True

    def pop(self) -> DomainEvent | None:
        """Remove and return the head event, or None when empty."""
        if not self._events:
            return None
        return self._events.popleft()

    def finish_drain(self) -> None:
        """Return to idle. Called by the drain once ``pop`` returned None."""
        self._draining = False


__all__ = ["EventQueue"]
