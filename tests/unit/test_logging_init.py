from __future__ import annotations

import logging
from io import StringIO

from src.logging.init import (
    LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    enable_debug,
    get_logger,
    log_summary,
    setup_logging,
)


def _capture(logger: logging.Logger) -> StringIO:
    buf = StringIO()
    handler = logging.StreamHandler(buf)
    handler.setFormatter(LabeledFormatter())
    logger.handlers[:] = [handler]
    return buf


def test_setup_logging_configures_app_logger():
    logger = setup_logging()
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert logger.propagate is False
    assert logging.getLevelName(SUMMARY_LEVEL) == "SUMMARY"


def test_setup_logging_idempotent():
    first = setup_logging()
    assert setup_logging() is first
    assert get_logger() is first
    assert len(first.handlers) == 1


def test_labeled_prefixes():
    logger = setup_logging()
    buf = _capture(logger)
    logger.info("info message")
    logger.warning("warning message")
    logger.error("error message")
    log_summary("files=1 success=1")
    assert buf.getvalue().splitlines() == [
        "INFO info message",
        "WARN warning message",
        "ERROR error message",
        "SUMMARY files=1 success=1",
    ]


def test_module_loggers_share_output():
    setup_logging()
    package_logger = logging.getLogger("src")
    buf = _capture(package_logger)
    logging.getLogger("src.tabular.normalizer").warning("amount out of range")
    assert buf.getvalue().strip() == "WARN amount out of range"


def test_enable_debug():
    logger = setup_logging()
    enable_debug()
    assert logger.level == logging.DEBUG
    assert all(h.level == logging.DEBUG for h in logger.handlers)
    assert logging.getLogger("src").level == logging.DEBUG
