"""
Unit tests for structured logging setup.
"""

from unittest.mock import patch

import pytest
import structlog

from tagcache.core.config import Settings
from tagcache.core.logging import add_app_context, configure_logging, get_logger


@pytest.fixture
def reset_structlog():
    """Restore structlog defaults after the test."""
    yield
    structlog.reset_defaults()


class TestLogging:
    """Test logging configuration."""

    def test_add_app_context(self):
        event = add_app_context(None, "info", {"event": "stored"})

        assert event == {"event": "stored", "app": "tagcache"}

    def test_add_app_context_keeps_existing(self):
        event = add_app_context(None, "info", {"event": "stored", "app": "caller"})

        assert event["app"] == "caller"

    def test_configure_logging(self, reset_structlog):
        configure_logging("debug", json_output=False)

        assert structlog.is_configured()
        processors = structlog.get_config()["processors"]
        assert add_app_context in processors
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_configure_logging_json(self, reset_structlog):
        configure_logging(json_output=True)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_output_outside_production(self, reset_structlog):
        configure_logging()

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_json_output_in_production(self, reset_structlog):
        with patch(
            "tagcache.core.logging.get_settings",
            return_value=Settings(ENVIRONMENT="production"),
        ):
            configure_logging()

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_get_logger(self, reset_structlog):
        configure_logging("info")

        logger = get_logger("tagcache.test")
        logger.info("Cache store", domain="myapp", key="k")
