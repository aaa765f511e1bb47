"""Domain events and the webhook event catalogue.

Event types are plain dotted strings (``"task.created"``). The catalogue
below lists the ones the application emits, but producers may dispatch any
string; unknown types are delivered with a generic envelope.
"""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from .base import utc_now

# Project events
PROJECT_CREATED = "project.created"
PROJECT_UPDATED = "project.updated"
PROJECT_DELETED = "project.deleted"
PROJECT_ARCHIVED = "project.archived"

# Task events
TASK_CREATED = "task.created"
TASK_UPDATED = "task.updated"
TASK_DELETED = "task.deleted"
TASK_STATUS_CHANGED = "task.status_changed"
TASK_ASSIGNED = "task.assigned"
TASK_UNASSIGNED = "task.unassigned"
TASK_COMPLETED = "task.completed"
TASK_STEP_ADDED = "task.step_added"
TASK_STEP_COMPLETED = "task.step_completed"
TASK_DEPENDENCY_ADDED = "task.dependency_added"
TASK_DEPENDENCY_REMOVED = "task.dependency_removed"

# Comment events
COMMENT_ADDED = "comment.added"
COMMENT_UPDATED = "comment.updated"
COMMENT_DELETED = "comment.deleted"
COMMENT_REPLIED = "comment.replied"

# Member events
MEMBER_ADDED = "member.added"
MEMBER_REMOVED = "member.removed"
MEMBER_ROLE_CHANGED = "member.role_changed"

# Notification events
NOTIFICATION_CREATED = "notification.created"

# Connectivity check, never emitted by the application itself
WEBHOOK_TEST_EVENT = "webhook.test"

EventCategory = Literal["project", "task", "comment", "member", "notification"]

EVENT_CATEGORIES: dict[str, EventCategory] = {
    PROJECT_CREATED: "project",
    PROJECT_UPDATED: "project",
    PROJECT_DELETED: "project",
    PROJECT_ARCHIVED: "project",
    TASK_CREATED: "task",
    TASK_UPDATED: "task",
    TASK_DELETED: "task",
    TASK_STATUS_CHANGED: "task",
    TASK_ASSIGNED: "task",
    TASK_UNASSIGNED: "task",
    TASK_COMPLETED: "task",
    TASK_STEP_ADDED: "task",
    TASK_STEP_COMPLETED: "task",
    TASK_DEPENDENCY_ADDED: "task",
    TASK_DEPENDENCY_REMOVED: "task",
    COMMENT_ADDED: "comment",
    COMMENT_UPDATED: "comment",
    COMMENT_DELETED: "comment",
    COMMENT_REPLIED: "comment",
    MEMBER_ADDED: "member",
    MEMBER_REMOVED: "member",
    MEMBER_ROLE_CHANGED: "member",
    NOTIFICATION_CREATED: "notification",
}

# All event types a subscription can select
ALL_EVENT_TYPES: list[str] = list(EVENT_CATEGORIES)


def is_known_event(event_type: str) -> bool:
    """Check whether an event type is part of the catalogue."""
    return event_type in EVENT_CATEGORIES


def events_by_category(category: EventCategory) -> list[str]:
    """List catalogue event types belonging to a category, in catalogue order."""
    return [event for event, cat in EVENT_CATEGORIES.items() if cat == category]


class DomainEvent(BaseModel):
    """An internal fact submitted for webhook dispatch.

    Immutable once created. The dispatcher consumes and discards it after
    fan-out; nothing is persisted.

    Attributes:
        id: Globally unique event identifier.
        type: Event type, e.g. "task.created".
        data: Producer-supplied payload (task, project, user, ...).
        enqueued_at: When the event entered the queue.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: UUID = Field(default_factory=uuid4)
    type: str = Field(min_length=1, description="Event type")
    data: dict[str, Any] = Field(default_factory=dict, description="Event payload")
    enqueued_at: datetime = Field(
        default_factory=utc_now,
        description="When the event was enqueued",
    )

    @property
    def category(self) -> EventCategory | None:
        """Catalogue category of this event, or None for custom types."""
        return EVENT_CATEGORIES.get(self.type)


__all__ = [
    "ALL_EVENT_TYPES",
    "COMMENT_ADDED",
    "COMMENT_DELETED",
    "COMMENT_REPLIED",
    "COMMENT_UPDATED",
    "DomainEvent",
    "EVENT_CATEGORIES",
    "EventCategory",
    "MEMBER_ADDED",
    "MEMBER_REMOVED",
    "MEMBER_ROLE_CHANGED",
    "NOTIFICATION_CREATED",
    "PROJECT_ARCHIVED",
    "PROJECT_CREATED",
    "PROJECT_DELETED",
    "PROJECT_UPDATED",
    "TASK_ASSIGNED",
    "TASK_COMPLETED",
    "TASK_CREATED",
    "TASK_DELETED",
    "TASK_DEPENDENCY_ADDED",
    "TASK_DEPENDENCY_REMOVED",
    "TASK_STATUS_CHANGED",
    "TASK_STEP_ADDED",
    "TASK_STEP_COMPLETED",
    "TASK_UNASSIGNED",
    "TASK_UPDATED",
    "WEBHOOK_TEST_EVENT",
    "events_by_category",
    "is_known_event",
]
