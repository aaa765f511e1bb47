"""Delivery tracking models.

A delivery is the full attempt series for one (event, subscription) pair.
It is identified by a single delivery id shared by every retry, which lets
receivers deduplicate. Nothing here is persisted; records live only as long
as the recorder keeps them.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .base import generate_id, utc_now


class DeliveryOutcome(str, Enum):
    """State of a delivery or the outcome of one attempt."""

    PENDING = "pending"
    SENDING = "sending"
    SUCCESS = "success"
    RETRY_SCHEDULED = "retry_scheduled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (DeliveryOutcome.SUCCESS, DeliveryOutcome.FAILED)


class DeliveryAttempt(BaseModel):
    """Record of a single HTTP attempt within a delivery.

    Attributes:
        delivery_id: Delivery this attempt belongs to.
        subscription_id: Target subscription.
        event_id: Domain event being delivered.
        event_type: Type of that event.
        attempt_number: 1-indexed attempt counter.
        outcome: SUCCESS, RETRY_SCHEDULED or FAILED.
        http_status: Response status code, if a response was received.
        error: Error description for unsuccessful attempts.
        retry_in_seconds: Backoff delay before the next attempt, if any.
        duration_ms: Wall time spent on the request.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    delivery_id: str
    subscription_id: str
    event_id: str
    event_type: str
    attempt_number: int = Field(ge=1)
    outcome: DeliveryOutcome
    http_status: int | None = None
    error: str | None = None
    retry_in_seconds: float | None = None
    duration_ms: float = Field(default=0.0, ge=0.0)
    started_at: datetime = Field(default_factory=utc_now)


class WebhookDelivery(BaseModel):
    """State of one delivery series, mutated by its worker.

    Transitions: pending -> sending -> {success, retry_scheduled, failed},
    retry_scheduled -> sending once the backoff elapses.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    id: str = Field(default_factory=generate_id, description="Delivery id, shared by retries")
    subscription_id: str
    event_id: str
    event_type: str
    url: str
    outcome: DeliveryOutcome = DeliveryOutcome.PENDING
    attempts: int = Field(default=0, ge=0, description="Attempts started so far")
    http_status: int | None = None
    response_body: str | None = None
    error: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    completed_at: datetime | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome is DeliveryOutcome.SUCCESS

    @property
    def is_terminal(self) -> bool:
        return self.outcome.is_terminal

    def mark_sending(self) -> "WebhookDelivery":
        """Start the next attempt."""
        self.outcome = DeliveryOutcome.SENDING
        self.attempts += 1
        return self

    def mark_success(self, http_status: int, response_body: str | None = None) -> "WebhookDelivery":
        """Mark delivery as successful."""
        self.outcome = DeliveryOutcome.SUCCESS
        self.completed_at = utc_now()
        self.http_status = http_status
        self.response_body = response_body
        self.error = None
        return self

    def mark_retrying(self, error: str, http_status: int | None = None) -> "WebhookDelivery":
        """Mark delivery as waiting for a backoff before the next attempt."""
        self.outcome = DeliveryOutcome.RETRY_SCHEDULED
        self.error = error
        self.http_status = http_status
        return self

    def mark_failed(
        self,
        error: str,
        http_status: int | None = None,
        response_body: str | None = None,
    ) -> "WebhookDelivery":
        """Mark delivery as failed (no more attempts)."""
        self.outcome = DeliveryOutcome.FAILED
        self.completed_at = utc_now()
        self.error = error
        self.http_status = http_status
        if response_body is not None:
            self.response_body = response_body
        return self


__all__ = [
    "DeliveryAttempt",
    "DeliveryOutcome",
    "WebhookDelivery",
]
