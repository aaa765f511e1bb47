"""Webhook subscription model.

Subscriptions are owned and persisted elsewhere in the application; the
dispatch engine only reads them.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, field_validator

from .base import utc_now


class WebhookSubscription(BaseModel):
    """A registered endpoint plus the event types it wants.

    Attributes:
        id: Subscription identifier (assigned by the owning store).
        project_id: Project whose events this subscription receives.
        name: Human-readable label, used in logs.
        url: HTTP(S) endpoint receiving POSTed envelopes.
        events: Event types this subscription selects.
        active: Inactive subscriptions are never targeted.
        secret_key: Optional HMAC secret; when set, every request is signed.
        created_at: When the subscription was registered.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(min_length=1, description="Subscription identifier")
    project_id: str = Field(min_length=1, description="Owning project")
    name: str = Field(default="", description="Human-readable label")
    url: HttpUrl = Field(description="HTTP(S) endpoint to receive events")
    events: list[str] = Field(default_factory=list, description="Subscribed event types")
    active: bool = Field(default=True, description="Whether the subscription is active")
    secret_key: str | None = Field(
        default=None,
        repr=False,
        description="Shared secret for HMAC-SHA256 signatures",
    )
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("secret_key")
    @classmethod
    def _empty_secret_is_none(cls, value: str | None) -> str | None:
        """Treat a blank secret as no secret so no signature header is sent."""
        if value is not None and not value.strip():
            return None
        return value

    def subscribes_to(self, event_type: str) -> bool:
        """Check if this subscription should receive the given event type."""
        return self.active and event_type in self.events

    @property
    def signs_payloads(self) -> bool:
        return self.secret_key is not None


__all__ = ["WebhookSubscription"]
