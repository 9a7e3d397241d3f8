"""Tests for progress callback implementations."""
import logging
from unittest.mock import MagicMock

from baseline.callbacks import LoggingCallbacks, NullCallbacks
from baseline.collector import BaselineCollector
from tests.fixtures.registry import RUN_KEY, WINLOGON_KEY


class TestLoggingCallbacks:

    def test_progress_logged_at_debug(self):
        logger = MagicMock()
        LoggingCallbacks(logger).on_progress(2, 5, RUN_KEY)
        logger.debug.assert_called_once_with("[%d/%d] %s", 2, 5, RUN_KEY)

    def test_on_log_uses_level(self):
        logger = MagicMock()
        callbacks = LoggingCallbacks(logger)
        callbacks.on_log("careful", "warning")
        callbacks.on_log("fyi")
        logger.warning.assert_called_once_with("careful")
        logger.info.assert_called_once_with("fyi")

    def test_errors_logged_as_warnings(self):
        logger = MagicMock()
        callbacks = LoggingCallbacks(logger)
        callbacks.on_error("Access denied", RUN_KEY)
        callbacks.on_error("Bad pattern")
        assert logger.warning.call_count == 2

    def test_default_logger_in_namespace(self, caplog):
        with caplog.at_level(logging.WARNING, logger="regbaseline"):
            LoggingCallbacks().on_error("Access denied", RUN_KEY)
        assert "Access denied" in caplog.text


def test_null_callbacks_accept_everything(populated_registry):
    callbacks = NullCallbacks()
    callbacks.on_progress(1, 1)
    callbacks.on_log("x", "error")
    callbacks.on_error("x", "y")
    records = BaselineCollector(populated_registry, callbacks=callbacks).collect(
        {RUN_KEY: [], WINLOGON_KEY: ["Shell"]}
    )
    assert len(records) == 2
