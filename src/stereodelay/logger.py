"""
Logging configuration for stereodelay.

All modules obtain their logger through get_logger(__name__), so every
record lands under the "stereodelay" namespace and can be tuned as a group.
Nothing on the per-sample processing path logs.

Copyright (c) 2026 stereodelay contributors

MIT License
"""

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "stereodelay"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Library default: stay silent unless the application configures logging
logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


def set_global_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure logging for an application built on stereodelay.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string for log messages
        log_file: Optional file path that also receives the records

    Returns:
        The package root logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format=format_string or DEFAULT_FORMAT,
        handlers=handlers,
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(log_level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger in the stereodelay namespace.

    Args:
        name: Module name (usually __name__). Names outside the package are
              nested under it. Defaults to the package root logger.
    """
    if name is None or name == ROOT_LOGGER_NAME:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
