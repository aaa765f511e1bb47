"""taskhooks exception hierarchy.

Provides structured exceptions for error handling throughout the codebase.
All exceptions inherit from TaskhooksError for easy catching.

Delivery errors never escape a delivery worker: they drive the retry
predicate and end up recorded as failed delivery results.
"""

from __future__ import annotations


class TaskhooksError(Exception):
    """Base exception for all taskhooks errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code.
    """

    code: str = "taskhooks_error"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, object]:
        """Convert exception to API-friendly dictionary."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
            }
        }


class ValidationError(TaskhooksError):
    """Invalid input provided.

    Attributes:
        field: The field that failed validation.
        message: Description of the validation failure.
    """

    code: str = "validation_error"

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")

    def to_dict(self) -> dict[str, object]:
        """Convert exception to API-friendly dictionary."""
        return {
            "error": {
                "code": self.code,
                "field": self.field,
                "message": self.message,
            }
        }


class ConfigurationError(TaskhooksError):
    """Configuration error.

    Raised when required configuration is missing or invalid.
    """

    code: str = "configuration_error"


class RoutingError(TaskhooksError):
    """An event could not be routed to a project.

    Attributes:
        event_id: ID of the unroutable event.
    """

    code: str = "routing_error"

    def __init__(self, event_id: str, message: str = "no project id in event data") -> None:
        self.event_id = event_id
        super().__init__(f"event {event_id}: {message}")


class ResolverError(TaskhooksError):
    """Subscription lookup failed."""

    code: str = "resolver_error"


class DispatcherClosedError(TaskhooksError):
    """An event was dispatched after the dispatcher was closed."""

    code: str = "dispatcher_closed"


class DeliveryError(TaskhooksError):
    """A single delivery attempt did not succeed.

    Attributes:
        status_code: HTTP status returned by the endpoint, if any.
    """

    code: str = "delivery_error"

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict[str, object]:
        """Convert exception to API-friendly dictionary."""
        return {
            "error": {
                "code": self.code,
                "status_code": self.status_code,
                "message": self.message,
            }
        }


class TransientDeliveryError(DeliveryError):
    """Retryable failure: 5xx response, timeout or transport error."""

    code: str = "transient_delivery_error"


class RejectedDeliveryError(DeliveryError):
    """Non-retryable failure: the endpoint rejected the request (4xx)."""

    code: str = "rejected_delivery_error"
