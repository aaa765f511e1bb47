"""Routing of domain events to webhook subscriptions.

Subscriptions are stored outside the dispatch engine. The engine only needs
an object implementing ``SubscriptionResolver``; ``InMemorySubscriptionResolver``
is provided for embedding and tests.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from taskhooks.models import WebhookSubscription

from .payloads import as_mapping


class ResolveResult(BaseModel):
    """Outcome of a subscription lookup.

    A non-empty ``error`` means the lookup failed and the event is dropped.
    """

    model_config = ConfigDict(frozen=True)

    data: list[WebhookSubscription] = Field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@runtime_checkable
class SubscriptionResolver(Protocol):
    """Looks up active subscriptions for a project and event type."""

    async def resolve(self, project_id: str, event_type: str) -> ResolveResult: ...


def _nested(data: Mapping[str, Any], key: str, field: str) -> Any:
    container = as_mapping(data.get(key))
    if container is None:
        return None
    return container.get(field)


def extract_project_id(event_data: Mapping[str, Any]) -> str | None:
    """Find the owning project of an event payload.

    Checked in order, first non-empty value wins:
    ``project.id``, ``task.project_id``, ``project_id``.

    Returns:
        The project id as a string, or None if the event cannot be routed.
    """
    candidates = (
        _nested(event_data, "project", "id"),
        _nested(event_data, "task", "project_id"),
        event_data.get("project_id"),
    )
    for candidate in candidates:
        if candidate:
            return str(candidate)
    return None


class InMemorySubscriptionResolver:
    """Dictionary-backed subscription store implementing SubscriptionResolver.

    Example:
        ```python
        resolver = InMemorySubscriptionResolver()
        resolver.add(WebhookSubscription(id="wh_1", project_id="p1", url=..., events=[...]))
        result = await resolver.resolve("p1", "task.created")
        ```
    """

    def __init__(self, subscriptions: Iterable[WebhookSubscription] = ()) -> None:
        self._subscriptions: dict[str, WebhookSubscription] = {}
        for subscription in subscriptions:
            self.add(subscription)

    def __len__(self) -> int:
        return len(self._subscriptions)

    def add(self, subscription: WebhookSubscription) -> None:
        """Add or replace a subscription (keyed by id)."""
        self._subscriptions[subscription.id] = subscription

    def remove(self, subscription_id: str) -> bool:
        """Remove a subscription. Returns False if it did not exist."""
        return self._subscriptions.pop(subscription_id, None) is not None

    def get(self, subscription_id: str) -> WebhookSubscription | None:
        return self._subscriptions.get(subscription_id)

    def list_for_project(self, project_id: str) -> list[WebhookSubscription]:
        """All subscriptions of a project, active or not, in insertion order."""
        return [s for s in self._subscriptions.values() if s.project_id == project_id]

    async def resolve(self, project_id: str, event_type: str) -> ResolveResult:
        matching = [
            s for s in self.list_for_project(project_id) if s.subscribes_to(event_type)
        ]
        return ResolveResult(data=matching)


__all__ = [
    "InMemorySubscriptionResolver",
    "ResolveResult",
    "SubscriptionResolver",
    "extract_project_id",
]
