"""Logging setup for the stockroom package."""

from __future__ import annotations

import logging
import sys

LOGGER_NAME = "stockroom"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_HANDLER_ATTR = "_stockroom_handler"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach one stream handler to the package logger.

    Safe to call on every Streamlit rerun: the handler is only installed once,
    later calls just update the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    if not any(getattr(h, _HANDLER_ATTR, False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        setattr(handler, _HANDLER_ATTR, True)
        logger.addHandler(handler)
        logger.propagate = False

    return logger


def reset_logging() -> None:
    logger = logging.getLogger(LOGGER_NAME)
    for h in list(logger.handlers):
        if getattr(h, _HANDLER_ATTR, False):
            logger.removeHandler(h)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
