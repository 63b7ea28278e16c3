"""Tests for centralized logging configuration."""

import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from tradejournal.system import LoggerFactory, LoggingConfig
from tradejournal.system.log_system import _ConsoleFormatter


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before and after each test."""
    LoggerFactory.reset()
    yield
    LoggerFactory.reset()


def _strip_ansi(text: str) -> str:
    import re

    return re.sub(r"\033\[[0-9;]*m", "", text)


class TestConfiguration:
    """Test LoggerFactory.configure() and defaults."""

    def test_auto_configure_on_first_use(self):
        assert not LoggerFactory.is_configured()

        logger = LoggerFactory.get_logger()

        assert LoggerFactory.is_configured()
        assert hasattr(logger, "info")

    def test_defaults(self):
        LoggerFactory.configure()

        config = LoggerFactory.get_config()
        assert config.level == "INFO"
        assert config.format == "console"
        assert config.enable_file is False
        assert config.file_level == "WARNING"

    def test_explicit_configuration(self):
        LoggerFactory.configure(LoggingConfig(level="DEBUG", format="json"))

        assert LoggerFactory.get_config().level == "DEBUG"
        assert LoggerFactory.get_config().format == "json"

    def test_reset_clears_configuration(self):
        LoggerFactory.configure(LoggingConfig(level="DEBUG"))

        LoggerFactory.reset()

        assert not LoggerFactory.is_configured()
        assert LoggerFactory.get_config().level == "INFO"

    def test_invalid_level_rejected(self):
        from pydantic import ValidationError

        with pytest.raises(ValidationError):
            LoggingConfig(level="VERBOSE")


class TestFileLogging:
    """Test JSON file output."""

    def test_file_receives_json_lines(self, tmp_path):
        log_file = tmp_path / "journal.log"
        LoggerFactory.configure(
            LoggingConfig(enable_file=True, file_path=log_file, file_level="DEBUG", file_rotation=False)
        )

        LoggerFactory.get_logger().info("journal_loader.loaded", trades=3)

        record = json.loads(log_file.read_text().strip())
        assert record["event"] == "journal_loader.loaded"
        assert record["trades"] == 3
        assert "log_timestamp" in record

    def test_default_file_path(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        LoggerFactory.configure(LoggingConfig(enable_file=True))

        assert LoggerFactory.get_config().file_path == Path("logs/tradejournal.log")
        assert (tmp_path / "logs").is_dir()

    def test_file_level_filters(self, tmp_path):
        log_file = tmp_path / "warn.log"
        LoggerFactory.configure(
            LoggingConfig(level="DEBUG", enable_file=True, file_path=log_file, file_rotation=False)
        )
        logger = LoggerFactory.get_logger()

        logger.info("reporting.report_built")
        logger.warning("journal_loader.skipped")

        events = [json.loads(line)["event"] for line in log_file.read_text().splitlines() if line.strip()]
        assert events == ["journal_loader.skipped"]

    def test_rotating_handler(self, tmp_path):
        log_file = tmp_path / "rotating.log"
        LoggerFactory.configure(
            LoggingConfig(enable_file=True, file_path=log_file, max_file_size_mb=1, backup_count=2)
        )

        handlers = [h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)]

        assert len(handlers) == 1
        assert handlers[0].maxBytes == 1024 * 1024
        assert handlers[0].backupCount == 2


class TestConsoleFormatter:
    """Test _ConsoleFormatter rendering."""

    def test_component_and_action(self):
        line = _strip_ansi(
            _ConsoleFormatter.format("journal_loader.loaded", {"trades": 5}, "INFO", "250106-093000.00")
        )

        assert line == "250106-093000.00 | Journal Loader | Loaded | trades=5"

    def test_plain_event(self):
        line = _strip_ansi(_ConsoleFormatter.format("starting", {}, "INFO", "t"))

        assert line == "t | starting"

    def test_private_and_metadata_keys_hidden(self):
        line = _strip_ansi(
            _ConsoleFormatter.format("reporting.report_built", {"_secret": 1, "logger": "x", "groups": 2}, "INFO", "t")
        )

        assert "_secret" not in line
        assert "logger=" not in line
        assert "groups=2" in line
