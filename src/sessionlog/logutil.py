"""Internal diagnostics for sessionlog itself.

These messages are about the library (rotations, orphaned session reports,
background write failures), never about the application's own log lines,
which go through ``Logger`` and the registry. They use the stdlib logger
``sessionlog``, configured lazily. Without configuration only warnings and
above are shown; ``SESSIONLOG_DIAGNOSTICS=debug`` or ``set_level`` lowers
that. The thread name is part of the format because the background writer
reports from its worker thread.
"""
from __future__ import annotations

import logging
import os
from typing import Optional, Union

ENV_LEVEL = "SESSIONLOG_DIAGNOSTICS"
LOGGER_NAME = "sessionlog"
FORMAT = "[%(name)s] %(levelname)s (%(threadName)s): %(message)s"

_LOGGER: Optional[logging.Logger] = None


def _env_level() -> int:
    raw = os.environ.get(ENV_LEVEL, "").strip().upper()
    level = logging.getLevelName(raw) if raw else logging.WARNING
    return level if isinstance(level, int) else logging.WARNING


def get_logger() -> logging.Logger:
    global _LOGGER
    if _LOGGER is None:
        logger = logging.getLogger(LOGGER_NAME)
        # Only add a handler if the application hasn't configured logging.
        if not logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(FORMAT))
            logger.addHandler(handler)
        logger.setLevel(_env_level())
        _LOGGER = logger
    return _LOGGER


def set_level(level: Union[int, str]) -> None:
    """Set the diagnostics threshold, e.g. ``set_level("debug")``."""
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            raise ValueError(f"unknown diagnostics level: {level!r}")
        level = resolved
    get_logger().setLevel(level)


def reset() -> None:
    """Forget the cached logger so the next ``get_logger`` re-reads the environment."""
    global _LOGGER
    _LOGGER = None


__all__ = ["get_logger", "set_level", "reset", "ENV_LEVEL"]
