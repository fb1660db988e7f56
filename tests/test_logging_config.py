import logging

import pytest

from thermalsentinel.logging_config import NOISY_LOGGERS, PACKAGE_LOGGER, setup_logging


@pytest.fixture(autouse=True)
def restore_package_logger():
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


def test_repeated_setup_does_not_duplicate_handlers():
    setup_logging(logging.INFO)
    logger = setup_logging(logging.DEBUG)
    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG


def test_file_handler_receives_module_logs(tmp_path):
    log_file = tmp_path / "sentinel.log"
    setup_logging(logging.INFO, log_file=str(log_file))
    logging.getLogger("thermalsentinel.controller.alerts").warning("Critical temperature 71.0 °C")
    for handler in logging.getLogger(PACKAGE_LOGGER).handlers:
        handler.flush()
    text = log_file.read_text(encoding="utf-8")
    assert "thermalsentinel.controller.alerts - WARNING - Critical temperature 71.0 °C" in text


def test_third_party_loggers_are_quieted():
    setup_logging(logging.DEBUG)
    for name in NOISY_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING
