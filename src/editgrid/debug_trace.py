"""Logging and timing for the grid engine.

Every module logs through a child of the ``editgrid`` logger. Setting
EDITGRID_DEBUG turns on console output at import. Engine operations that
touch many rows (paste decoding, sorting, snapshots) are timed with
``perf_timer`` or ``@log_perf``; only timings at or above
``PERF_THRESHOLD_MS`` (EDITGRID_PERF_MS, default 0) are logged.

Usage:
    from .debug_trace import get_logger, perf_timer

    logger = get_logger(__name__)

    with perf_timer("clipboard decode", row_count=len(rows)):
        ...
"""

from __future__ import annotations

import logging
import os
import sys
import time
from collections.abc import Callable
from contextlib import contextmanager
from functools import wraps
from typing import Any

logger = logging.getLogger("editgrid")

PERF_THRESHOLD_MS = float(os.environ.get("EDITGRID_PERF_MS", "0") or 0)


def get_logger(name: str) -> logging.Logger:
    """Logger for an engine module.

    ``editgrid.*`` names are used as they are; anything else is hung under
    the package logger.
    """
    if name.startswith("editgrid."):
        return logging.getLogger(name)
    return logger.getChild(name)


def setup_debug_logging(level: int = logging.DEBUG) -> None:
    """Send engine log records to stdout. Does nothing if already set up."""
    if logger.handlers:
        return
    # pythonw and frozen GUI builds have no usable stdout
    if sys.stdout is None or not hasattr(sys.stdout, "write"):
        logger.setLevel(logging.WARNING)
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s.%(msecs)03d [%(levelname)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    logger.setLevel(level)
    logger.addHandler(handler)


def _report(operation: str, elapsed_ms: float, row_count: int | None) -> None:
    if elapsed_ms < PERF_THRESHOLD_MS:
        return
    if row_count is None:
        logger.debug("PERF: %s took %.2fms", operation, elapsed_ms)
    else:
        logger.debug("PERF: %s (%d rows) took %.2fms", operation, row_count, elapsed_ms)


@contextmanager
def perf_timer(operation: str, row_count: int | None = None):
    """Time the enclosed block and log it at DEBUG.

    Args:
        operation: Label for the log line.
        row_count: Number of rows the operation works on, if known.
    """
    if not logger.isEnabledFor(logging.DEBUG):
        yield
        return
    start = time.perf_counter()
    try:
        yield
    finally:
        _report(operation, (time.perf_counter() - start) * 1000, row_count)


def log_perf(func: Callable) -> Callable:
    """Decorator form of ``perf_timer``, labelled with the function's qualified name."""

    @wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        with perf_timer(func.__qualname__):
            return func(*args, **kwargs)

    return wrapper


if os.environ.get("EDITGRID_DEBUG"):
    setup_debug_logging()
