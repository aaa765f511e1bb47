"""Tests for taskhooks exception hierarchy."""

from taskhooks.exceptions import (
    ConfigurationError,
    DeliveryError,
    DispatcherClosedError,
    RejectedDeliveryError,
    ResolverError,
    RoutingError,
    TaskhooksError,
    TransientDeliveryError,
    ValidationError,
)


class TestTaskhooksError:
    """Tests for the base TaskhooksError class."""

    def test_error_message(self):
        """Should store and return message."""
        error = TaskhooksError("Something went wrong")
        assert error.message == "Something went wrong"
        assert str(error) == "Something went wrong"

    def test_to_dict(self):
        """Should convert to API-friendly dict."""
        assert TaskhooksError("boom").to_dict() == {
            "error": {"code": "taskhooks_error", "message": "boom"}
        }

    def test_inheritance(self):
        """All custom exceptions should inherit from TaskhooksError."""
        exceptions = [
            ValidationError("field", "invalid"),
            ConfigurationError("missing"),
            RoutingError("evt_1"),
            ResolverError("lookup failed"),
            DispatcherClosedError("closed"),
            TransientDeliveryError("HTTP 500", status_code=500),
            RejectedDeliveryError("HTTP 404", status_code=404),
        ]
        for exc in exceptions:
            assert isinstance(exc, TaskhooksError)


class TestValidationError:
    def test_field_in_message_and_dict(self):
        error = ValidationError("event_type", "must not be empty")

        assert error.field == "event_type"
        assert error.message == "event_type: must not be empty"
        assert error.to_dict()["error"]["field"] == "event_type"


class TestRoutingError:
    def test_default_message(self):
        error = RoutingError("evt_1")

        assert error.event_id == "evt_1"
        assert error.code == "routing_error"
        assert "no project id" in error.message


class TestDeliveryErrors:
    """Tests for the retry classification exceptions."""

    def test_status_code(self):
        error = TransientDeliveryError("HTTP 503", status_code=503)

        assert isinstance(error, DeliveryError)
        assert error.to_dict() == {
            "error": {
                "code": "transient_delivery_error",
                "status_code": 503,
                "message": "HTTP 503",
            }
        }

    def test_status_code_optional(self):
        assert TransientDeliveryError("Request timed out").status_code is None

    def test_rejected_is_not_transient(self):
        assert not isinstance(RejectedDeliveryError("HTTP 400"), TransientDeliveryError)
