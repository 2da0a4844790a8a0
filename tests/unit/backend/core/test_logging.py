"""
Unit Tests for Logging Configuration.
"""

import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import MagicMock, patch

import pytest

from itdesk.backend.core.config_schema import LoggingSchema


class TestValidSources:
    """Tests for VALID_SOURCES constant."""

    def test_valid_sources_cover_every_frontend(self):
        from itdesk.backend.core.logging import VALID_SOURCES
        from itdesk.backend.core.middleware import KNOWN_FRONTENDS

        assert KNOWN_FRONTENDS <= VALID_SOURCES
        assert {"telegram", "notifications"} <= VALID_SOURCES


class TestSetupLogging:
    """Tests for setup_logging function."""

    @pytest.fixture
    def logging_config(self) -> LoggingSchema:
        return LoggingSchema(
            level="INFO",
            format="json",
            handlers={
                "console": {"enabled": True},
                "file": {
                    "enabled": False,
                    "path": "logs/system.jsonl",
                    "max_bytes": 10485760,
                    "backup_count": 5,
                },
            },
        )

    def test_config_level_used_by_default(self, logging_config):
        """Should use the level from logging.yaml."""
        from itdesk.backend.core.logging import setup_logging

        setup_logging(config=logging_config)

        assert logging.getLogger().level == logging.INFO

    def test_override_takes_precedence(self, logging_config):
        from itdesk.backend.core.logging import setup_logging

        setup_logging(level="DEBUG", config=logging_config)

        assert logging.getLogger().level == logging.DEBUG

    def test_file_logging_disabled(self, logging_config):
        """Should not attach a file handler when disabled."""
        from itdesk.backend.core.logging import setup_logging

        setup_logging(config=logging_config)

        handlers = logging.getLogger().handlers
        assert not any(isinstance(h, RotatingFileHandler) for h in handlers)

    def test_file_logging_enabled(self, tmp_path, logging_config):
        """Should create the log directory and a rotating handler."""
        from itdesk.backend.core.logging import setup_logging

        log_file = tmp_path / "logs" / "system.jsonl"
        with patch("itdesk.backend.core.logging._resolve_log_path", return_value=log_file):
            setup_logging(enable_file_logging=True, config=logging_config)

        handlers = logging.getLogger().handlers
        assert any(isinstance(h, RotatingFileHandler) for h in handlers)
        assert log_file.parent.exists()

        for handler in handlers[:]:
            if isinstance(handler, RotatingFileHandler):
                handler.close()
                logging.getLogger().removeHandler(handler)


class TestLogWithSource:
    """Tests for log_with_source helper function."""

    def test_adds_source_field(self):
        from itdesk.backend.core.logging import get_logger, log_with_source

        logger = get_logger("test")
        mock_info = MagicMock()

        with patch.object(logger, "info", mock_info):
            log_with_source(logger, "telegram", "info", "Update received", chat_id=1)

        mock_info.assert_called_once_with("Update received", source="telegram", chat_id=1)

    def test_raises_on_invalid_level(self):
        """Should raise AttributeError for invalid log levels (no fallback)."""
        from itdesk.backend.core.logging import get_logger, log_with_source

        with pytest.raises(AttributeError):
            log_with_source(get_logger("test"), "web", "nonexistent_level", "Test")


class TestResolveLogPath:

    def test_relative_to_project_root(self, tmp_path):
        from itdesk.backend.core.logging import _resolve_log_path

        with patch("itdesk.backend.core.logging.find_project_root", return_value=tmp_path):
            assert _resolve_log_path("logs/system.jsonl") == tmp_path / "logs" / "system.jsonl"
