"""Severity levels.

Levels are totally ordered so thresholds compare with plain ``<``/``>=``.
"""
from __future__ import annotations

from enum import IntEnum

from rich.style import Style


class Level(IntEnum):
    DEBUG = 0
    VERBOSE = 1
    INFO = 2
    WARNING = 3
    CRITICAL = 4
    ERROR = 5
    FATAL = 6

    @property
    def tag(self) -> str:
        """Plain display tag, e.g. ``[I]``."""
        return f"[{self.name[0]}]"

    def colored(self) -> str:
        """Display tag wrapped in ANSI color codes."""
        return _STYLES[self].render(self.tag)

    @classmethod
    def parse(cls, value: "Level | str | int") -> "Level":
        if isinstance(value, Level):
            return value
        if isinstance(value, int):
            return cls(value)
        key = str(value).strip().upper()
        if key == "WARN":
            key = "WARNING"
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"unknown level: {value!r}") from None

    def __str__(self) -> str:
        return self.tag


_GRAY = Style(color="bright_black")
_GREEN = Style(color="green")
_YELLOW = Style(color="yellow")
_RED = Style(color="red")

_STYLES = {
    Level.DEBUG: _GRAY,
    Level.VERBOSE: _GRAY,
    Level.INFO: _GREEN,
    Level.WARNING: _YELLOW,
    Level.CRITICAL: _YELLOW,
    Level.ERROR: _RED,
    Level.FATAL: _RED,
}

__all__ = ["Level"]
