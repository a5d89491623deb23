from __future__ import annotations

import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Union

if sys.version_info >= (3, 11):
    import tomllib  # type: ignore
else:  # pragma: no cover - fallback for older interpreters
    import tomli as tomllib  # type: ignore

from .context import Processor, processor
from .level import Level


@dataclass
class Defaults:
    # Directory new entries write into
    directory: str = "./logs"
    # Console threshold
    log_level: Level = Level.INFO
    # File threshold
    write_level: Level = Level.INFO
    processor: Processor = field(default=processor)
    # Collapse content-free sessions into one summary line
    ease_on_empty: bool = True
    # Hand file writes to a single background worker
    background: bool = False


# Session start/end markers carry no level of their own; they route as this.
SESSION_MARKER_LEVEL = Level.INFO

# Horizontal glyphs in a session report border (excluding the corner).
BOX_WIDTH = 100


def defaults_from_mapping(data: Dict[str, Any], base: Defaults | None = None) -> Defaults:
    """Build ``Defaults`` from a plain mapping (e.g. a parsed TOML table).

    Unknown keys are rejected so typos do not silently fall back to defaults.
    """
    base = base or Defaults()
    known = {"directory", "log_level", "write_level", "ease_on_empty", "background"}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"unknown sessionlog config keys: {', '.join(unknown)}")
    updates: Dict[str, Any] = {}
    if "directory" in data:
        updates["directory"] = str(data["directory"])
    if "log_level" in data:
        updates["log_level"] = Level.parse(data["log_level"])
    if "write_level" in data:
        updates["write_level"] = Level.parse(data["write_level"])
    if "ease_on_empty" in data:
        updates["ease_on_empty"] = bool(data["ease_on_empty"])
    if "background" in data:
        updates["background"] = bool(data["background"])
    return replace(base, **updates)


def load_defaults(path: Union[str, Path]) -> Defaults:
    """Read the ``[sessionlog]`` table of a TOML file."""
    text = Path(path).read_text(encoding="utf-8")
    data = tomllib.loads(text)
    table = data.get("sessionlog", {})
    if not isinstance(table, dict):
        raise ValueError(f"[sessionlog] in {path} must be a table")
    return defaults_from_mapping(table)


__all__ = [
    "Defaults",
    "SESSION_MARKER_LEVEL",
    "BOX_WIDTH",
    "defaults_from_mapping",
    "load_defaults",
]
