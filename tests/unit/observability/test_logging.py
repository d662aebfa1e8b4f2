"""Tests for structured logging."""

import pytest
import structlog

from panelgate.observability.logging import (
    PIIRedactor,
    get_logger,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_structlog():
    """Restore structlog defaults after each test."""
    yield
    structlog.reset_defaults()


class TestSetupLogging:
    """Tests for setup_logging function."""

    @pytest.mark.parametrize("format", ["json", "console"])
    def test_setup_formats(self, format: str) -> None:
        """Both renderers can be configured and used."""
        setup_logging(level="DEBUG", format=format, redact_pii=True)
        logger = get_logger("test")
        logger.info("test_message", user_id="u1")

    def test_get_logger_returns_logger(self) -> None:
        """Should return a usable logger."""
        setup_logging(level="INFO", format="json", redact_pii=False)
        assert get_logger("test.module") is not None


class TestPIIRedactor:
    """Tests for PIIRedactor processor."""

    @pytest.fixture
    def redactor(self) -> PIIRedactor:
        return PIIRedactor()

    def test_redacts_sensitive_keys(self, redactor: PIIRedactor) -> None:
        """Credential-shaped keys are replaced wholesale."""
        event = {"event": "x", "api_key": "sk-123", "Authorization": "Bearer abc"}
        result = redactor(None, "info", event)
        assert result["api_key"] == "[REDACTED]"
        assert result["Authorization"] == "[REDACTED]"
        assert result["event"] == "x"

    def test_redacts_bearer_in_values(self, redactor: PIIRedactor) -> None:
        """Bearer tokens inside free text are masked."""
        result = redactor(None, "info", {"detail": "sent Bearer sk-live.abc failed"})
        assert "sk-live.abc" not in result["detail"]
        assert "Bearer [REDACTED]" in result["detail"]

    def test_redacts_email_in_nested_values(self, redactor: PIIRedactor) -> None:
        """Emails in nested dicts and lists are masked."""
        event = {"ctx": {"who": "a@b.com"}, "items": ["c@d.org", 3]}
        result = redactor(None, "info", event)
        assert result["ctx"]["who"] == "[EMAIL]"
        assert result["items"] == ["[EMAIL]", 3]
