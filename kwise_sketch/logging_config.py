"""Logging helpers for :mod:`kwise_sketch`.

The library is silent by default: its root logger carries a ``NullHandler``
and every module logs through ``logging.getLogger(__name__)``.  Applications
opt in explicitly::

    import kwise_sketch
    kwise_sketch.enable_console_logging(level="DEBUG")

or through the environment::

    KWISE_SKETCH_LOGGING=DEBUG
"""
from __future__ import annotations

import logging
import os
from typing import Union

LOGGER_NAME = "kwise_sketch"
ENV_LEVEL = "KWISE_SKETCH_LOGGING"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LogLevel = Union[str, int]


def _get_level(level: LogLevel) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, level.upper(), logging.INFO)


def _get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def _clear_handlers() -> None:
    logger = _get_logger()
    for handler in logger.handlers[:]:
        if not isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)
            handler.close()


def enable_console_logging(
    level: LogLevel = "INFO",
    format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> logging.StreamHandler:
    """Attach a stderr handler to the package logger and return it."""
    logger = _get_logger()
    logger.setLevel(_get_level(level))

    handler = logging.StreamHandler()
    handler.setLevel(_get_level(level))
    handler.setFormatter(logging.Formatter(format, date_format))
    logger.addHandler(handler)
    return handler


def set_level(level: LogLevel) -> None:
    logger = _get_logger()
    logger.setLevel(_get_level(level))
    for handler in logger.handlers:
        handler.setLevel(_get_level(level))


def disable_logging() -> None:
    """Drop every handler added by this module and silence the package."""
    _clear_handlers()
    _get_logger().setLevel(logging.CRITICAL + 1)


def configure_from_env() -> bool:
    """Enable console logging when ``KWISE_SKETCH_LOGGING`` is set.

    Returns True if a handler was installed.
    """
    level = os.environ.get(ENV_LEVEL)
    if not level:
        return False
    _clear_handlers()
    enable_console_logging(level=level)
    return True


__all__ = [
    "LOGGER_NAME",
    "ENV_LEVEL",
    "configure_from_env",
    "disable_logging",
    "enable_console_logging",
    "set_level",
]
