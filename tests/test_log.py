"""Tests for ``setup_logging``."""

import logging
from logging.handlers import TimedRotatingFileHandler

import pytest
from rich.logging import RichHandler

from db_sync.log import parse_level, setup_logging


class TestParseLevel:
    @pytest.mark.parametrize(
        "name, level",
        [
            ("debug", logging.DEBUG),
            ("INFO", logging.INFO),
            ("warn", logging.WARNING),
            ("warning", logging.WARNING),
            ("error", logging.ERROR),
            ("verbose", logging.INFO),
            ("", logging.INFO),
            (None, logging.INFO),
        ],
    )
    def test_levels(self, name, level):
        assert parse_level(name) == level


class TestSetupLogging:
    def test_console_handler(self):
        logger = setup_logging("debug")
        assert logger.name == "db_sync"
        assert logger.level == logging.DEBUG
        assert logger.propagate is False
        assert [type(h) for h in logger.handlers] == [RichHandler]

    def test_file_handler_rotates_daily(self, tmp_path):
        log_file = tmp_path / "nested" / "sync.log"
        logger = setup_logging("info", file=str(log_file), console=False)

        (handler,) = logger.handlers
        assert isinstance(handler, TimedRotatingFileHandler)
        assert handler.when == "MIDNIGHT"
        assert log_file.parent.is_dir()

        logging.getLogger("db_sync.engine.runner").info("hello file")
        handler.flush()
        content = log_file.read_text(encoding="utf-8")
        assert "[INFO] hello file" in content

    def test_repeated_setup_replaces_handlers(self, tmp_path):
        setup_logging("info", file=str(tmp_path / "a.log"))
        logger = setup_logging("error")
        assert len(logger.handlers) == 1
        assert logger.level == logging.ERROR

    def test_no_outputs_uses_null_handler(self):
        logger = setup_logging("info", console=False)
        assert [type(h) for h in logger.handlers] == [logging.NullHandler]
