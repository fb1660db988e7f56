"""
Logging Configuration
=====================
Sets up the 'thermalsentinel' logger for the GUI and the headless poller.

Why is this file needed?
------------------------
1. One place for format and handlers: alert transitions, poll errors and
   fetch failures from every module end up in the same stream.
2. Noise control: requests (through urllib3) and pyvista log chatty
   connection and rendering details; they are held at WARNING so a
   3-second poll loop stays readable at DEBUG.
"""
import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "thermalsentinel"
NOISY_LOGGERS: tuple[str, ...] = ("urllib3", "pyvista")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Attach console (and optionally file) handlers to the package logger.

    Safe to call again, e.g. when the CLI re-parses its arguments: previous
    handlers are dropped first.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path; the file is overwritten on every start.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S')

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger.debug(f"Logging initialized at {logging.getLevelName(level)}" + (f", writing to {log_file}" if log_file else ""))
    return logger
