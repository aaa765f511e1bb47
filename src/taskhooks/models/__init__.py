"""Data models for taskhooks.

Event Types:
    - DomainEvent: An internal fact queued for webhook dispatch
    - Event catalogue constants (TASK_CREATED, MEMBER_ROLE_CHANGED, ...)

Webhook Types:
    - WebhookSubscription: A registered endpoint (read-only to the engine)
    - WebhookEnvelope: The JSON body sent to subscribers
    - WebhookDelivery: State of one delivery attempt series
    - DeliveryAttempt: Record of a single HTTP attempt
"""

from .base import generate_id, utc_now
from .delivery import DeliveryAttempt, DeliveryOutcome, WebhookDelivery
from .envelope import WebhookEnvelope
from .events import (
    ALL_EVENT_TYPES,
    COMMENT_ADDED,
    COMMENT_DELETED,
    COMMENT_REPLIED,
    COMMENT_UPDATED,
    EVENT_CATEGORIES,
    MEMBER_ADDED,
    MEMBER_REMOVED,
    MEMBER_ROLE_CHANGED,
    NOTIFICATION_CREATED,
    PROJECT_ARCHIVED,
    PROJECT_CREATED,
    PROJECT_DELETED,
    PROJECT_UPDATED,
    TASK_ASSIGNED,
    TASK_COMPLETED,
    TASK_CREATED,
    TASK_DELETED,
    TASK_DEPENDENCY_ADDED,
    TASK_DEPENDENCY_REMOVED,
    TASK_STATUS_CHANGED,
    TASK_STEP_ADDED,
    TASK_STEP_COMPLETED,
    TASK_UNASSIGNED,
    TASK_UPDATED,
    WEBHOOK_TEST_EVENT,
    DomainEvent,
    EventCategory,
    events_by_category,
    is_known_event,
)
from .subscription import WebhookSubscription

__all__ = [
    # Helpers
    "generate_id",
    "utc_now",
    # Events
    "ALL_EVENT_TYPES",
    "DomainEvent",
    "EVENT_CATEGORIES",
    "EventCategory",
    "events_by_category",
    "is_known_event",
    "COMMENT_ADDED",
    "COMMENT_DELETED",
    "COMMENT_REPLIED",
    "COMMENT_UPDATED",
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
    # Webhooks
    "DeliveryAttempt",
    "DeliveryOutcome",
    "WebhookDelivery",
    "WebhookEnvelope",
    "WebhookSubscription",
]
