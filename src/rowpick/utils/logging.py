"""Logging setup for rowpick."""

from __future__ import annotations

import logging
import sys
from typing import Optional

_LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_DATE_FORMAT = "%H:%M:%S"

_handler: Optional[logging.StreamHandler] = None


def setup_logging(level: str = "INFO", stream=None) -> None:
    """Configure the root ``rowpick`` logger.

    Log records go to stderr by default so that generated SQL or DOT written
    to stdout can be piped without noise.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR)
        stream: Optional stream override (defaults to sys.stderr)
    """
    global _handler

    root = logging.getLogger("rowpick")
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # sys.stderr is resolved on every call: it may have been swapped since
    target = stream or sys.stderr

    if _handler is None:
        _handler = logging.StreamHandler(target)
        _handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
        root.addHandler(_handler)
        root.propagate = False
    else:
        _handler.setStream(target)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger namespaced under ``rowpick``.

    Args:
        name: Logger name, typically ``__name__``

    Returns:
        Logger instance
    """
    if not name:
        return logging.getLogger("rowpick")
    if name == "rowpick" or name.startswith("rowpick."):
        return logging.getLogger(name)
    return logging.getLogger(f"rowpick.{name}")
