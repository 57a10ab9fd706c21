"""Logging for the Link Parity Checker.

Every module takes a child of the "LinkParity" logger::

    from ..logger import get_logger
    logger = get_logger('verifier')   # -> "LinkParity.verifier"

so a single :func:`configure` call (done by the launcher in ``main.py``)
sets the level and destinations for the whole application.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
ROOT_NAME = "LinkParity"

# Rotating log file: 5 MB x 3 backups
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3


def _with_format(handler: logging.Handler, fmt: str) -> logging.Handler:
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure(level: Union[int, str] = "INFO",
              log_file: Optional[Union[str, Path]] = None,
              log_format: str = LOG_FORMAT) -> logging.Logger:
    """Set level and handlers of the application logger.

    Previous handlers are replaced, so calling this again (e.g. from the
    launcher after import time defaults) does not duplicate output.

    Args:
        level: Numeric or textual logging level (e.g. "DEBUG")
        log_file: Optional path of a rotating log file, console only when None
        log_format: Format string for every handler

    Returns:
        The application logger
    """
    handlers = [_with_format(logging.StreamHandler(sys.stdout), log_format)]
    if log_file is not None:
        handlers.append(_with_format(
            RotatingFileHandler(str(log_file), maxBytes=LOG_FILE_MAX_BYTES,
                                backupCount=LOG_FILE_BACKUPS, encoding="utf-8"),
            log_format
        ))

    root = logging.getLogger(ROOT_NAME)
    root.setLevel(level)
    for old in root.handlers:
        old.close()
    root.handlers[:] = handlers
    root.propagate = False
    return root


def get_logger(name: str) -> logging.Logger:
    """Return the ``LinkParity.<name>`` child logger."""
    return logging.getLogger(ROOT_NAME).getChild(name)


logger: logging.Logger = configure()

__all__ = ["logger", "configure", "get_logger"]
