"""Shared logger for the calculator package."""
import logging
import sys


LOGGER_NAME = "arithmetic_calculator"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(processName)s: %(message)s"


def get_logger(name: str = LOGGER_NAME, level: int = logging.INFO) -> logging.Logger:
    """
    Return the package logger, attaching a stderr handler on first use.

    :param str name: Logger name
    :param int level: Initial logging level

    :return: Configured logger
    :rtype: logging.Logger
    """
    log = logging.getLogger(name)
    if not log.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        log.addHandler(handler)
        log.setLevel(level)
    return log


def set_level(level: str) -> None:
    """Change the level of the package logger (e.g. "DEBUG")."""
    logger.setLevel(level.upper())


logger = get_logger()
