"""Tests for credvault/utils/logging_config.py."""

import pytest
import structlog

from credvault.utils.logging_config import REDACTED, configure_logging, redact_secrets


@pytest.fixture(autouse=True)
def reset_structlog():
    """Restore structlog defaults after each test."""
    yield
    structlog.reset_defaults()


class TestRedactSecrets:
    """Tests for the redaction processor."""

    def test_sensitive_keys_redacted(self):
        """Should replace values of secret-looking keys."""
        event = {"event": "credential_stored", "secret": "hunter2", "Password": "x", "reference": "a/b"}

        result = redact_secrets(None, "info", event)

        assert result["secret"] == REDACTED
        assert result["Password"] == REDACTED
        assert result["reference"] == "a/b"
        assert result["event"] == "credential_stored"


class TestConfigureLogging:
    """Tests for logging setup."""

    def test_logs_go_to_stderr(self, capsys):
        """Should write JSON events to stderr, never stdout."""
        configure_logging("INFO")

        structlog.get_logger("test").info("credential_stored", reference="site/alice", secret="hunter2")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert '"event": "credential_stored"' in captured.err
        assert "hunter2" not in captured.err

    def test_level_filtering(self, capsys):
        """Should drop events below the configured level."""
        configure_logging("warning")

        structlog.get_logger("test").info("credential_stored")

        assert capsys.readouterr().err == ""

    def test_unknown_level(self):
        """Should reject unknown level names."""
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging("LOUD")
