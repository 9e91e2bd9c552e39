#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Tests for CLI logging setup."""

import logging

import pytest

from bb2html.logging_utils import PLAIN_FORMAT, TRACE_FORMAT, configure_logging


@pytest.fixture
def restore_root_logger():
    """Restore the root logger's handlers and level after the test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.unit
class TestConfigureLogging:
    """Test root logger configuration."""

    def test_level_by_name(self, restore_root_logger) -> None:
        """Test that a level name is resolved."""
        root = configure_logging("debug")
        assert root is restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert root.handlers[0].formatter._fmt == PLAIN_FORMAT

    def test_unknown_level_name(self, restore_root_logger) -> None:
        """Test that an unknown name falls back to INFO."""
        assert configure_logging("chatty").level == logging.INFO

    def test_trace_format(self, restore_root_logger) -> None:
        """Test that trace mode adds timestamps and logger names."""
        root = configure_logging(logging.INFO, trace_mode=True)
        assert root.handlers[0].formatter._fmt == TRACE_FORMAT

    def test_log_file(self, restore_root_logger, tmp_path) -> None:
        """Test that messages are copied to the log file."""
        log_file = tmp_path / "bb2html.log"
        root = configure_logging(logging.INFO, log_file=str(log_file))
        assert len(root.handlers) == 2
        logging.getLogger("bb2html.test").info("hello file")
        for handler in root.handlers:
            handler.flush()
        assert "INFO: hello file" in log_file.read_text(encoding="utf-8")

    def test_unwritable_log_file(self, restore_root_logger, tmp_path) -> None:
        """Test that a bad log path keeps console logging only."""
        root = configure_logging(logging.INFO, log_file=str(tmp_path / "missing" / "x.log"))
        assert len(root.handlers) == 1
