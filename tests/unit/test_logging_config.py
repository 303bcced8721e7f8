"""Unit tests for logging setup and formatters."""

import json
import logging
import logging.handlers
import sys

import pytest

from src.utils.logging_config import JsonFormatter, TextFormatter, get_logger, setup_logging


def _record(msg="Located token sections", **extra) -> logging.LogRecord:
    record = logging.LogRecord("src.test", logging.INFO, __file__, 10, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root_logger():
    """Put back the root logger's handlers and level after setup_logging runs."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_includes_extra_fields(self):
        output = JsonFormatter().format(_record(old_start_line=4, old_end_line=21))
        payload = json.loads(output)

        assert payload["message"] == "Located token sections"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "src.test"
        assert payload["old_start_line"] == 4
        assert payload["old_end_line"] == 21
        assert "timestamp" in payload

    def test_includes_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord("src.test", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

        payload = json.loads(JsonFormatter().format(record))
        assert "ValueError: boom" in payload["exception"]

    def test_non_serializable_extra_uses_str(self):
        payload = json.loads(JsonFormatter().format(_record(path=object())))
        assert payload["path"].startswith("<object object")


class TestTextFormatter:
    """Tests for TextFormatter."""

    def test_appends_extra_fields(self):
        output = TextFormatter().format(_record(branch="design-tokens/auto-update"))

        assert "INFO" in output
        assert "Located token sections" in output
        assert output.endswith("| branch=design-tokens/auto-update")

    def test_no_extras(self):
        assert "|" not in TextFormatter().format(_record())


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_json_console_handler(self, restore_root_logger):
        setup_logging(level="debug", log_format="json")

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_repeated_setup_does_not_duplicate(self, restore_root_logger):
        setup_logging()
        setup_logging(log_format="text")

        root = restore_root_logger
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, TextFormatter)

    def test_rotating_file_handler(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "logs" / "app.log"

        setup_logging(log_file=str(log_file), max_file_size_mb=1, backup_count=2)
        get_logger("src.test").info("written", extra={"request_id": "abc"})
        for handler in restore_root_logger.handlers:
            handler.flush()

        file_handlers = [
            h for h in restore_root_logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == 1024 * 1024
        assert file_handlers[0].backupCount == 2
        line = json.loads(log_file.read_text().splitlines()[0])
        assert line["request_id"] == "abc"
