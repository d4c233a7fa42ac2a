"""Logging for spmsift.

Every command prints its report (text or JSON) on stdout so it can be piped
into other tools. Progress and failure messages therefore go through the
``spmsift`` logger, which only ever writes to stderr and, optionally, to a
log file.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

ROOT_LOGGER = "spmsift"

CONSOLE_FORMAT = "[spmsift] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``spmsift.<name>``, or the root spmsift logger."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)


def _console_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.set_name("spmsift-console")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def _file_handler(path: Path) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.set_name("spmsift-file")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def configure_logging(*, verbose: bool = False, log_file: Path | None = None) -> logging.Logger:
    """Attach the stderr handler (DEBUG when ``verbose``) and an optional file sink.

    Calling this again replaces the handlers from the previous call, so
    repeated ``main()`` invocations in one process never duplicate output.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_console_handler(level))
    if log_file is not None:
        logger.addHandler(_file_handler(log_file))
    return logger


__all__ = ["configure_logging", "get_logger"]
