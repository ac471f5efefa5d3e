import json
import logging

import pytest
import structlog

from centerpane.core.log_setup import LOGGER_NAME, SpamFilter, set_log_level, setup_logging


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    structlog.reset_defaults()
    std_logger = logging.getLogger(LOGGER_NAME)
    for handler in std_logger.handlers[:]:
        handler.close()
        std_logger.removeHandler(handler)


def test_file_log_is_json(tmp_path):
    log_file = tmp_path / "state" / "centerpane.log"
    logger = setup_logging(level=logging.INFO, log_file=str(log_file))
    logger.info("Centering enabled.", windows=2)
    logger.debug("hidden")
    for handler in logging.getLogger(LOGGER_NAME).handlers:
        handler.flush()
    records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert [r["event"] for r in records] == ["Centering enabled."]
    assert records[0]["windows"] == 2
    assert records[0]["level"] == "info"


def test_set_log_level():
    setup_logging(level=logging.INFO, log_file=None)
    set_log_level(logging.WARNING)
    std_logger = logging.getLogger(LOGGER_NAME)
    assert std_logger.level == logging.WARNING
    assert all(h.level == logging.WARNING for h in std_logger.handlers)


def test_spam_filter_drops_repeated_reloads():
    spam_filter = SpamFilter()

    def record(msg):
        return logging.LogRecord(LOGGER_NAME, logging.INFO, __file__, 1, msg, None, None)

    assert spam_filter.filter(record("Configuration file modified. Reloading..."))
    assert spam_filter.filter(record("Configuration reloaded from file."))
    assert not spam_filter.filter(record("Configuration file modified. Reloading..."))
    assert not spam_filter.filter(record("Configuration reloaded from file."))
    assert spam_filter.filter(record("Centering enabled."))
    assert spam_filter.filter(record("Configuration reloaded from file."))
