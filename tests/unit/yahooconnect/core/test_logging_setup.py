#!/usr/bin/env python3
"""
Tests for logging configuration.
"""

import logging

from yahooconnect.core.logging import (
    PACKAGE_LOGGER,
    configure_logging,
    get_logger,
    set_log_level,
)


def test_get_logger_returns_named_logger():
    logger = get_logger("yahooconnect.api.crumb")

    assert isinstance(logger, logging.Logger)
    assert logger.name == "yahooconnect.api.crumb"


def test_set_log_level_accepts_strings():
    set_log_level("WARNING")

    assert logging.getLogger(PACKAGE_LOGGER).level == logging.WARNING

    set_log_level(logging.INFO)
    assert logging.getLogger(PACKAGE_LOGGER).level == logging.INFO


def test_configure_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "yahooconnect.log"

    configure_logging(level="DEBUG", log_file=str(log_file), console=False)
    get_logger("yahooconnect.test").info("crumb cache ready")
    for handler in logging.getLogger(PACKAGE_LOGGER).handlers:
        handler.flush()

    assert log_file.exists()
    assert "crumb cache ready" in log_file.read_text(encoding="utf-8")

    # Leave the package logger without file handlers for other tests
    configure_logging(level="INFO", console=False)
    for handler in list(logging.getLogger(PACKAGE_LOGGER).handlers):
        handler.close()
        logging.getLogger(PACKAGE_LOGGER).removeHandler(handler)


def test_configure_logging_without_handlers_sets_level():
    configure_logging(level="ERROR", console=False)

    assert logging.getLogger(PACKAGE_LOGGER).level == logging.ERROR
    set_log_level(logging.INFO)
