# log.py
# SPDX-License-Identifier: MIT
"""Logging helpers for jsonlpipe.

The package logger carries a NullHandler, so nothing is printed until an
application configures logging. :class:`WarningBudget` keeps per-line
warnings from flooding logs on badly formed input.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from typing import Any, TextIO

__all__ = [
    "PACKAGE_LOGGER_NAME",
    "DEFAULT_FORMAT",
    "get_logger",
    "configure_logging",
    "temp_level",
    "WarningBudget",
]

PACKAGE_LOGGER_NAME = "jsonlpipe"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Marks the handler installed by configure_logging so reconfiguring replaces it.
_HANDLER_ATTR = "_jsonlpipe_stream_handler"

logging.getLogger(PACKAGE_LOGGER_NAME).addHandler(logging.NullHandler())


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.INFO)
    return level


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``name`` or the package logger when omitted."""
    return logging.getLogger(name or PACKAGE_LOGGER_NAME)


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: TextIO | None = None,
    fmt: str | None = None,
    datefmt: str | None = None,
    propagate: bool = True,
    logger_name: str = PACKAGE_LOGGER_NAME,
) -> logging.Logger:
    """Send a jsonlpipe logger's records to a stream.

    Calling this again replaces the handler it installed earlier instead of
    stacking a second one.

    Args:
        level (int | str): Level or level name, e.g. ``"DEBUG"``.
        stream (TextIO | None): Destination; ``sys.stderr`` when None.
        fmt (str | None): Format string; :data:`DEFAULT_FORMAT` when None.
        datefmt (str | None): Date format for ``%(asctime)s``.
        propagate (bool): Keep passing records to ancestor loggers (pytest's
            ``caplog`` relies on this).
        logger_name (str): Logger to configure.

    Returns:
        logging.Logger: The configured logger.
    """
    logger = get_logger(logger_name)
    logger.setLevel(_resolve_level(level))
    logger.propagate = propagate

    for existing in list(logger.handlers):
        if getattr(existing, _HANDLER_ATTR, False):
            logger.removeHandler(existing)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=fmt or DEFAULT_FORMAT, datefmt=datefmt))
    setattr(handler, _HANDLER_ATTR, True)
    logger.addHandler(handler)
    return logger


@contextmanager
def temp_level(level: int | str, name: str | None = None):
    """Apply a logger level for the duration of a ``with`` block."""
    logger = get_logger(name)
    previous = logger.level
    logger.setLevel(_resolve_level(level))
    try:
        yield logger
    finally:
        logger.setLevel(previous)


class WarningBudget:
    """Emit the first ``limit`` warnings at WARNING and the rest at DEBUG.

    One budget belongs to one run (a parser, a conversion), so a stream with
    thousands of bad lines logs a handful of warnings plus a final count.

    Args:
        logger (logging.Logger): Destination logger.
        limit (int): Number of warnings logged at WARNING level.
    """

    __slots__ = ("logger", "limit", "count")

    def __init__(self, logger: logging.Logger, limit: int = 5) -> None:
        self.logger = logger
        self.limit = limit
        self.count = 0

    @property
    def suppressed(self) -> int:
        """Warnings that were demoted to DEBUG."""
        return max(0, self.count - self.limit)

    def warn(self, msg: str, *args: Any) -> None:
        self.count += 1
        if self.count > self.limit:
            self.logger.debug(msg, *args)
            return
        self.logger.warning(msg, *args)
        if self.count == self.limit:
            self.logger.info("Further warnings of this kind are logged at DEBUG level")
