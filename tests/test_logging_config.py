"""Tests for logging setup."""

import logging

import pytest

from onpage_seo.logging_config import QUIET_LOGGERS, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Test cases for setup_logging."""

    def test_level_and_quiet_libraries(self, restore_root_logger):
        setup_logging(level="debug")

        assert restore_root_logger.level == logging.DEBUG
        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_unknown_level_defaults_to_info(self, restore_root_logger):
        setup_logging(level="chatty")
        assert restore_root_logger.level == logging.INFO

    def test_log_file(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "logs" / "run.log"
        setup_logging(log_file=str(log_file))

        logging.getLogger("onpage_seo.test").info("hello file")
        for handler in restore_root_logger.handlers:
            handler.flush()

        assert "hello file" in log_file.read_text(encoding="utf-8")
