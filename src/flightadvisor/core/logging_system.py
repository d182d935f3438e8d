"""Logging setup for FlightAdvisor.

Thin layer over the standard library logging module so every module can
grab a logger with ``get_logger(__name__)`` and the entry point configures
handlers once.

Typical usage:
    from flightadvisor.core.logging_system import get_logger, initialize_logging

    initialize_logging(level="DEBUG")
    logger = get_logger(__name__)
"""

import logging
import sys
from pathlib import Path

ROOT_LOGGER_NAME = "flightadvisor"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module.

    Args:
        name: Logger name, usually ``__name__``.

    Returns:
        Logger instance.
    """
    return logging.getLogger(name)


def initialize_logging(
    level: int | str = logging.WARNING,
    log_file: Path | str | None = None,
) -> logging.Logger:
    """Configure the package root logger.

    Safe to call more than once; later calls replace the handlers and level.

    Args:
        level: Log level name or number.
        log_file: Optional file to append log records to.

    Returns:
        The configured package root logger.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root.setLevel(level)
    root.propagate = False

    root.debug("Logging initialized at level %s", logging.getLevelName(level))
    return root
