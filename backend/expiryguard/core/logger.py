"""
Logging setup shared by every module.

Everything logs under the ``expiryguard`` namespace. The namespace root gets
one console handler (and a file handler when ``LOG_FILE`` is set); child
loggers just propagate to it.

Usage:
    from expiryguard.core.logger import get_logger
    logger = get_logger(__name__)
    logger.info("Risk zone loaded")
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from expiryguard.core.config import settings

ROOT_LOGGER_NAME = "expiryguard"

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> logging.Logger:
    """
    Attach handlers to the ``expiryguard`` root logger.

    Safe to call more than once: handlers are only added the first time.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel((level or settings.log_level).upper())

    if root.handlers:
        return root

    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root.addHandler(console_handler)

    log_file = log_file or settings.log_file
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return root


def get_logger(name: str) -> logging.Logger:
    """Return a logger nested under the ``expiryguard`` namespace."""
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
