"""Logging setup shared by the scanner components."""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER_NAME = "arbscan"

_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    log_file: Optional[Union[str, Path]] = None,
    level: str = "INFO",
) -> logging.Logger:
    """
    Configure a logger with a console handler and an optional file handler.

    Calling this more than once replaces the previously installed handlers,
    so repeated setup never duplicates output.

    Args:
        name: Logger name (children inherit its handlers)
        log_file: Optional path of a log file; parent directories are created
        level: Logging level name

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    if logger.hasHandlers():
        logger.handlers.clear()

    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger; names outside the ``arbscan`` tree are nested under it."""
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
