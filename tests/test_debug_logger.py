"""Tests for the debug log setup."""
import logging

import pytest

from linc.debug_logger import LOGGER_NAME, _resolve_level, get_logger, reset_logger


class TestResolveLevel:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, logging.WARNING),
            ("", logging.WARNING),
            ("0", logging.WARNING),
            ("1", logging.INFO),
            ("2", logging.DEBUG),
            ("debug", logging.DEBUG),
            ("ERROR", logging.ERROR),
            ("loud", logging.WARNING),
        ],
    )
    def test_levels(self, value, expected):
        assert _resolve_level(value) == expected


class TestGetLogger:
    def test_writes_to_state_dir(self, temp_state_dir, monkeypatch):
        monkeypatch.setenv("LINC_DEBUG", "1")
        reset_logger()

        logger = get_logger()
        logging.getLogger("linc.tui.controller").info("selected team %s", "ENG")
        for handler in logger.handlers:
            handler.flush()

        text = (temp_state_dir / "debug.log").read_text()
        assert "INFO linc.tui.controller: selected team ENG" in text

    def test_below_level_is_dropped(self, temp_state_dir):
        logger = get_logger()
        logger.info("quiet")
        for handler in logger.handlers:
            handler.flush()

        assert "quiet" not in (temp_state_dir / "debug.log").read_text()

    def test_idempotent(self, temp_state_dir):
        first = get_logger()
        count = len(first.handlers)
        second = get_logger()

        assert first is second
        assert first.name == LOGGER_NAME
        assert len(second.handlers) == count

    def test_reset_detaches_handler(self, temp_state_dir):
        logger = get_logger()
        count = len(logger.handlers)
        reset_logger()

        assert len(logger.handlers) == count - 1
