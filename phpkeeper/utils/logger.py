"""
Logging utilities for phpkeeper.

Diagnostic output for phpkeeper goes through the standard :mod:`logging`
module under the ``phpkeeper`` logger namespace. This module owns handler
setup (once per process, guarded by a lock), the optional ANSI level
coloring, and the mapping from CLI ``-v`` counts to logging levels.

User-facing messages belong in :mod:`phpkeeper.utils.console` instead.
"""

from __future__ import annotations

import os
import sys
import logging
import threading
from typing import IO, Optional

from phpkeeper.constants import (
    LOG_DATE_FORMAT,
    LOG_DEFAULT_FORMAT,
    LOG_VERBOSE_FORMAT,
)

ROOT_LOGGER_NAME = "phpkeeper"

_logging_configured: bool = False
_lock = threading.Lock()


class ColoredFormatter(logging.Formatter):
    """Formatter that wraps the level name in an ANSI color.

    Coloring is skipped when ``use_color`` is false, when ``NO_COLOR`` or
    ``CI`` is set, or when stderr is not a terminal. The record itself is
    left untouched so other handlers see the plain level name.
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: str,
        *,
        datefmt: Optional[str] = None,
        use_color: bool = True,
    ) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if not (color and self.use_color and _stderr_supports_color()):
            return super().format(record)

        original = record.levelname
        record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def _stderr_supports_color() -> bool:
    if os.environ.get("NO_COLOR") or os.environ.get("CI"):
        return False
    try:
        return sys.stderr.isatty()
    except (AttributeError, OSError):
        return False


def level_for_verbosity(verbose: int) -> int:
    """Translate a ``-v`` count into a logging level.

    ``0`` (or negative) maps to WARNING, ``1`` to INFO, anything higher to
    DEBUG.
    """
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def setup_logging(
    *,
    level: int = logging.INFO,
    verbose: bool = False,
    stream: Optional[IO[str]] = None,
) -> None:
    """Install a single stream handler on the ``phpkeeper`` logger.

    Calling this again replaces the previous handler, so the CLI can
    reconfigure logging per invocation without stacking handlers.

    Args:
        level: Logging level (e.g., ``logging.INFO``, ``logging.DEBUG``).
        verbose: Use the verbose format with timestamps and logger names.
        stream: Output stream; defaults to ``sys.stderr``.
    """
    global _logging_configured

    formatter = ColoredFormatter(
        LOG_VERBOSE_FORMAT if verbose else LOG_DEFAULT_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        use_color=not os.environ.get("NO_COLOR"),
    )
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(formatter)

    with _lock:
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.setLevel(level)
        root_logger.addHandler(handler)
        root_logger.propagate = False
        _logging_configured = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger inside the ``phpkeeper`` namespace.

    ``get_logger("selector")`` and ``get_logger("phpkeeper.selector")`` both
    return the ``phpkeeper.selector`` logger.
    """
    if not name or name == ROOT_LOGGER_NAME:
        full_name = ROOT_LOGGER_NAME
    elif name.startswith(ROOT_LOGGER_NAME + "."):
        full_name = name
    else:
        full_name = f"{ROOT_LOGGER_NAME}.{name}"

    logger = logging.getLogger(full_name)

    # Library use without setup_logging(): stay silent
    if not logger.handlers and (not logger.parent or not logger.parent.handlers):
        logger.addHandler(logging.NullHandler())

    return logger


def is_logging_configured() -> bool:
    """Return True once :func:`setup_logging` has run."""
    return _logging_configured


def disable_logging() -> None:
    """Silence all phpkeeper logging output."""
    global _logging_configured

    with _lock:
        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.handlers.clear()
        root_logger.addHandler(logging.NullHandler())
        root_logger.setLevel(logging.NOTSET)
        _logging_configured = False
