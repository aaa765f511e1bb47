"""The JSON envelope transmitted to webhook subscribers."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .base import generate_id, utc_now


class WebhookEnvelope(BaseModel):
    """Body of a webhook request.

    ``timestamp`` and ``delivery_id`` are always set by the dispatcher, never
    copied from domain data. Event-specific fields live under ``data``.

    Example body:
        {"event": "task.created", "timestamp": "2025-01-01T12:00:00Z",
         "delivery_id": "5b0c...", "data": {"task": {...}, "project": {...}}}
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    event: str = Field(description="Event type")
    timestamp: datetime = Field(default_factory=utc_now)
    delivery_id: str = Field(default_factory=generate_id)
    data: dict[str, Any] = Field(default_factory=dict)

    def to_bytes(self) -> bytes:
        """Serialize to the exact bytes that are signed and transmitted."""
        return self.model_dump_json().encode("utf-8")


__all__ = ["WebhookEnvelope"]
