"""Payload shaping for webhook envelopes.

Each known event type has a template naming which objects of the event data
are sent and which of their fields. Shaping keeps receivers from seeing
whatever internal attributes a producer happened to pass along. Event types
without a template are sent as-is.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from taskhooks.models import (
    COMMENT_ADDED,
    COMMENT_REPLIED,
    MEMBER_ADDED,
    MEMBER_ROLE_CHANGED,
    PROJECT_ARCHIVED,
    PROJECT_CREATED,
    PROJECT_DELETED,
    PROJECT_UPDATED,
    TASK_ASSIGNED,
    TASK_COMPLETED,
    TASK_CREATED,
    TASK_STATUS_CHANGED,
    TASK_UPDATED,
    WebhookEnvelope,
    WebhookSubscription,
)

# key -> fields to keep; None keeps the whole value
PayloadTemplate = dict[str, list[str] | None]

_USER_FIELDS = ["id", "name", "email"]

PAYLOAD_TEMPLATES: dict[str, PayloadTemplate] = {
    PROJECT_CREATED: {
        "project": ["id", "name", "description", "owner_id", "created_at"],
        "user": _USER_FIELDS,
    },
    PROJECT_UPDATED: {
        "project": ["id", "name", "description", "updated_at"],
        "changes": None,
        "user": _USER_FIELDS,
    },
    PROJECT_DELETED: {
        "project": ["id", "name"],
        "user": _USER_FIELDS,
    },
    PROJECT_ARCHIVED: {
        "project": ["id", "name", "archived_at"],
        "user": _USER_FIELDS,
    },
    TASK_CREATED: {
        "task": ["id", "name", "description", "status", "priority", "created_at"],
        "project": ["id", "name"],
        "user": _USER_FIELDS,
        "assigned_users": _USER_FIELDS,
    },
    TASK_UPDATED: {
        "task": ["id", "name", "description", "status", "priority", "updated_at"],
        "changes": None,
        "project": ["id", "name"],
        "user": _USER_FIELDS,
    },
    TASK_COMPLETED: {
        "task": ["id", "name", "completion_percentage", "completed_at"],
        "project": ["id", "name"],
        "user": _USER_FIELDS,
        "assigned_users": _USER_FIELDS,
    },
    TASK_ASSIGNED: {
        "task": ["id", "name", "status"],
        "project": ["id", "name"],
        "assigned_to": _USER_FIELDS,
        "assigned_by": _USER_FIELDS,
    },
    TASK_STATUS_CHANGED: {
        "task": ["id", "name"],
        "status": ["old_status", "new_status"],
        "project": ["id", "name"],
        "user": _USER_FIELDS,
    },
    COMMENT_ADDED: {
        "comment": ["id", "content", "created_at"],
        "task": ["id", "name"],
        "project": ["id", "name"],
        "user": _USER_FIELDS,
    },
    COMMENT_REPLIED: {
        "comment": ["id", "content", "created_at"],
        "parent_comment": ["id", "content"],
        "task": ["id", "name"],
        "project": ["id", "name"],
        "user": _USER_FIELDS,
    },
    MEMBER_ADDED: {
        "project": ["id", "name"],
        "member": ["id", "name", "email", "role"],
        "added_by": _USER_FIELDS,
    },
    MEMBER_ROLE_CHANGED: {
        "project": ["id", "name"],
        "member": _USER_FIELDS,
        "role": ["old_role", "new_role"],
        "changed_by": _USER_FIELDS,
    },
}


def as_mapping(value: Any) -> Mapping[str, Any] | None:
    """Return a mapping view of a domain object, or None if it has no fields.

    Producers pass plain dicts or pydantic models interchangeably.
    """
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Mapping):
        return value
    return None


def _pick(value: Any, fields: list[str]) -> Any:
    mapping = as_mapping(value)
    if mapping is not None:
        return {field: mapping[field] for field in fields if field in mapping}
    if isinstance(value, list | tuple):
        return [_pick(item, fields) for item in value]
    return value


def _plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    return value


class PayloadBuilder:
    """Builds the event-specific ``data`` section of webhook envelopes.

    Example:
        ```python
        builder = PayloadBuilder()
        data = builder.build("task.created", {"task": task, "project": project})
        envelope = builder.envelope("task.created", data)
        ```
    """

    def __init__(self, templates: Mapping[str, PayloadTemplate] | None = None) -> None:
        self._templates: dict[str, PayloadTemplate] = dict(
            PAYLOAD_TEMPLATES if templates is None else templates
        )

    def has_template(self, event_type: str) -> bool:
        return event_type in self._templates

    def register(self, event_type: str, template: PayloadTemplate) -> None:
        """Add or replace the template for an event type."""
        self._templates[event_type] = dict(template)

    def build(self, event_type: str, event_data: Mapping[str, Any]) -> dict[str, Any]:
        """Shape event data according to the event type's template.

        Keys missing from (or empty in) the event data are left out. Without
        a template the data is passed through unchanged.
        """
        template = self._templates.get(event_type)
        if template is None:
            return {key: _plain(value) for key, value in event_data.items()}

        shaped: dict[str, Any] = {}
        for key, fields in template.items():
            value = event_data.get(key)
            if not value:
                continue
            shaped[key] = _plain(value) if fields is None else _pick(value, fields)
        return shaped

    def envelope(
        self,
        event_type: str,
        data: Mapping[str, Any],
        timestamp: datetime | None = None,
    ) -> WebhookEnvelope:
        """Wrap shaped data in an envelope with a fresh delivery id.

        The timestamp and delivery id are assigned here unconditionally;
        keys of the same name inside ``data`` stay inside ``data``.
        """
        if timestamp is None:
            return WebhookEnvelope(event=event_type, data=dict(data))
        return WebhookEnvelope(event=event_type, timestamp=timestamp, data=dict(data))


def detect_changes(previous: Any, current: Any) -> dict[str, dict[str, Any]]:
    """Field-level diff of two versions of a domain object.

    Only fields present on ``current`` are compared, matching how update
    forms submit the full edited object.

    Returns:
        Mapping of field name to {"from": old, "to": new}.
    """
    before = as_mapping(previous) or {}
    after = as_mapping(current) or {}
    return {
        key: {"from": before.get(key), "to": value}
        for key, value in after.items()
        if before.get(key) != value
    }


def build_test_payload(subscription: WebhookSubscription) -> dict[str, Any]:
    """Data section of the connectivity check sent by ``send_test``."""
    return {
        "webhook": {"id": subscription.id, "name": subscription.name},
        "message": "This is a webhook connectivity test",
    }


__all__ = [
    "PAYLOAD_TEMPLATES",
    "PayloadBuilder",
    "PayloadTemplate",
    "as_mapping",
    "build_test_payload",
    "detect_changes",
]
