"""Aggregation point for delivery outcomes.

``dispatch()`` never reports outcomes to its caller. Workers report every
attempt and every terminal delivery to a recorder instead; anything that
needs confirmation (metrics, an admin screen, tests) reads from there.
"""

from __future__ import annotations

from collections import deque
from typing import Protocol, runtime_checkable

from taskhooks.models import DeliveryAttempt, DeliveryOutcome, WebhookDelivery


@runtime_checkable
class DeliveryRecorder(Protocol):
    """Receives delivery attempts and terminal deliveries."""

    async def record_attempt(self, attempt: DeliveryAttempt) -> None: ...

    async def record_delivery(self, delivery: WebhookDelivery) -> None: ...


class InMemoryDeliveryLog:
    """Bounded in-memory recorder. Oldest entries are evicted first."""

    def __init__(self, max_entries: int = 1000) -> None:
        self._max_entries = max_entries
        self._attempts: deque[DeliveryAttempt] = deque(maxlen=max_entries)
        self._deliveries: deque[WebhookDelivery] = deque(maxlen=max_entries)

    async def record_attempt(self, attempt: DeliveryAttempt) -> None:
        self._attempts.append(attempt)

    async def record_delivery(self, delivery: WebhookDelivery) -> None:
        self._deliveries.append(delivery.model_copy())

    @property
    def attempts(self) -> list[DeliveryAttempt]:
        return list(self._attempts)

    @property
    def deliveries(self) -> list[WebhookDelivery]:
        return list(self._deliveries)

    def attempts_for(self, delivery_id: str) -> list[DeliveryAttempt]:
        """Attempts of one delivery, in the order they were made."""
        return [a for a in self._attempts if a.delivery_id == delivery_id]

    def deliveries_for_event(self, event_id: str) -> list[WebhookDelivery]:
        return [d for d in self._deliveries if d.event_id == event_id]

    def deliveries_for_subscription(self, subscription_id: str) -> list[WebhookDelivery]:
        return [d for d in self._deliveries if d.subscription_id == subscription_id]

    def count(self, outcome: DeliveryOutcome) -> int:
        """Number of recorded terminal deliveries with the given outcome."""
        return sum(1 for d in self._deliveries if d.outcome is outcome)

    def clear(self) -> None:
        self._attempts.clear()
        self._deliveries.clear()


__all__ = ["DeliveryRecorder", "InMemoryDeliveryLog"]
