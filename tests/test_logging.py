"""Tests for taskhooks structured logging."""

import structlog

from taskhooks.config import Settings
from taskhooks.logging import (
    bind_context,
    clear_context,
    configure_from_settings,
    configure_logging,
    event_context,
    get_logger,
    redact_secrets,
    unbind_context,
)


class TestConfigureLogging:
    """Tests for logging configuration."""

    def test_configure_with_defaults(self):
        """Should configure with INFO level and JSON format by default."""
        configure_logging()
        logger = get_logger("test")
        # Should not raise
        logger.info("test message")

    def test_configure_with_text_format(self):
        """Should accept text format for development."""
        configure_logging(level="DEBUG", format="text")
        logger = get_logger("test")
        logger.debug("text format message")

    def test_configure_from_settings(self):
        configure_from_settings(Settings(log_level="WARNING", log_format="json"))
        get_logger("test").warning("from settings")

    def test_loggers_are_callable(self):
        logger = get_logger()
        assert callable(getattr(logger, "info", None))
        assert callable(getattr(logger, "exception", None))


class TestRedaction:
    """Tests for the secret-masking processor."""

    def test_masks_secret_keys(self):
        event = {"event": "x", "secret_key": "abc", "signature": "sha256=00", "url": "u"}

        result = redact_secrets(None, "info", event)

        assert result["secret_key"] == "***"
        assert result["signature"] == "***"
        assert result["url"] == "u"

    def test_leaves_none_untouched(self):
        result = redact_secrets(None, "info", {"event": "x", "secret": None})
        assert result["secret"] is None


class TestContextBinding:
    """Tests for context variable binding."""

    def setup_method(self):
        """Clear context before each test."""
        clear_context()

    def teardown_method(self):
        """Clear context after each test."""
        clear_context()

    def test_bind_and_unbind(self):
        bind_context(request_id="r1", project_id="p1")
        unbind_context("request_id")

        assert structlog.contextvars.get_contextvars() == {"project_id": "p1"}

    def test_event_context_is_scoped(self):
        with event_context(event_id="e1", event_type="task.created"):
            assert structlog.contextvars.get_contextvars()["event_id"] == "e1"

        assert "event_id" not in structlog.contextvars.get_contextvars()

    def test_event_context_restores_outer_value(self):
        bind_context(event_id="outer")

        with event_context(event_id="inner"):
            assert structlog.contextvars.get_contextvars()["event_id"] == "inner"

        assert structlog.contextvars.get_contextvars()["event_id"] == "outer"
