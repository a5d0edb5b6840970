#!/usr/bin/env python3
"""
Logging configuration for the PCG editor

Every module logs through a child of the "pcg_editor" logger. Codec
diagnostics (skipped program lines, raster fallbacks) are WARNING or INFO
records, so callers decide what reaches the console.
"""

import logging
import os
import sys
from typing import Optional

LOGGER_NAME = "pcg_editor"
DEBUG_ENV_VAR = "PCG_EDITOR_DEBUG"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%H:%M:%S"


def _debug_forced() -> bool:
    return os.environ.get(DEBUG_ENV_VAR, "").lower() in ("1", "true", "yes")


def _attach(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)


def setup_logging(level: str = "INFO",
                  log_file: Optional[str] = None) -> logging.Logger:
    """
    Configure the pcg_editor logger.

    Calling it again replaces the handlers from the previous call.
    PCG_EDITOR_DEBUG=1 overrides the level with DEBUG.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Also write records to this file

    Returns:
        The configured package logger
    """
    numeric_level = logging.DEBUG if _debug_forced() else getattr(
        logging, level.upper(), logging.INFO
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    _attach(logger, logging.StreamHandler(sys.stdout), numeric_level)

    if log_file:
        try:
            _attach(logger, logging.FileHandler(log_file), numeric_level)
        except OSError as e:
            logger.warning("Could not create log file %s: %s", log_file, e)

    # Records stop here instead of reaching the root logger
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    """Child logger for a module, e.g. get_logger('program_codec')"""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
