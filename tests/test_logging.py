"""Tests for file logging and error ids."""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from explorer_gui.core.debug_support import log_exception_with_id, new_error_id
from explorer_gui.core.logging_setup import setup_logging


@pytest.fixture
def clean_logger():
    logger = logging.getLogger("explorer_gui")
    saved = list(logger.handlers), logger.level
    logger.handlers = []
    yield logger
    for h in logger.handlers:
        h.close()
    logger.handlers, level = saved
    logger.setLevel(level)


class TestLogging:
    def test_writes_to_app_home(self, app_home, clean_logger):
        handler = setup_logging(logging.INFO)
        logging.getLogger("explorer_gui.transfer").info("copy done")
        handler.flush()

        assert isinstance(handler, RotatingFileHandler)
        assert "copy done" in (app_home / "app.log").read_text(encoding="utf-8")

    def test_second_call_reuses_handler(self, clean_logger):
        first = setup_logging()
        second = setup_logging()
        assert first is second
        assert len(clean_logger.handlers) == 1

    def test_level_from_environment(self, clean_logger, monkeypatch):
        monkeypatch.setenv("EXPLORER_GUI_LOG_LEVEL", "debug")
        setup_logging(logging.INFO)
        assert clean_logger.level == logging.DEBUG


class TestErrorIds:
    def test_format(self):
        err = new_error_id("fs")
        assert str(err).startswith("FS-")
        assert len(err.token) == 6

    def test_logged_with_traceback(self, caplog):
        try:
            raise OSError("disk gone")
        except OSError as e:
            with caplog.at_level(logging.ERROR, logger="explorer_gui"):
                err = log_exception_with_id("fs", e)
        assert f"Error-ID={err}" in caplog.text
