"""Logger handles and the logging surface shared with sessions."""
from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Optional

from .context import Context, Location, LogContext, Processor, local_now
from .errors import FatalError
from .level import Level

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .registry import LoggerEntry, Registry
    from .session import Session


def caller_location(stacklevel: int = 1) -> Location:
    """Source location ``stacklevel`` frames above the caller of this function."""
    frame = sys._getframe(stacklevel + 1)
    return Location(frame.f_code.co_filename, frame.f_lineno)


def route(entry: "LoggerEntry", level: Level, ctx: Context) -> Optional[str]:
    """Print the console rendering if ``level`` passes ``log_level``.

    Returns the file rendering when ``level`` passes ``write_level``, else
    None. The processor runs outside any registry lock.
    """
    to_console = level >= entry.log_level
    to_file = level >= entry.write_level
    if not (to_console or to_file):
        return None
    console_text, file_text = entry.processor(ctx)
    if to_console:
        print(console_text, flush=True)
    return file_text if to_file else None


class Loggable:
    """Level helpers on top of ``log``; implemented by loggers and sessions."""

    def log(self, level: Level, message: str, *, stacklevel: int = 1) -> None:
        raise NotImplementedError

    def debug(self, message: str, *, stacklevel: int = 1) -> None:
        self.log(Level.DEBUG, message, stacklevel=stacklevel + 1)

    def verbose(self, message: str, *, stacklevel: int = 1) -> None:
        self.log(Level.VERBOSE, message, stacklevel=stacklevel + 1)

    def info(self, message: str, *, stacklevel: int = 1) -> None:
        self.log(Level.INFO, message, stacklevel=stacklevel + 1)

    def warning(self, message: str, *, stacklevel: int = 1) -> None:
        self.log(Level.WARNING, message, stacklevel=stacklevel + 1)

    def critical(self, message: str, *, stacklevel: int = 1) -> None:
        self.log(Level.CRITICAL, message, stacklevel=stacklevel + 1)

    def error(self, message: str, *, stacklevel: int = 1) -> None:
        self.log(Level.ERROR, message, stacklevel=stacklevel + 1)

    def fatal(self, message: str, *, stacklevel: int = 1) -> None:
        """Record ``message`` at FATAL, then raise ``FatalError``.

        Only for unrecoverable conditions.
        """
        self.log(Level.FATAL, message, stacklevel=stacklevel + 1)


class Logger(Loggable):
    """Handle to a named entry in a ``Registry``.

    Handles are cheap; every configuration read or write goes through the
    registry, so two handles with the same name always agree.
    """

    def __init__(self, name: str, registry: "Registry") -> None:
        self.name = name
        self.registry = registry

    def __repr__(self) -> str:
        return f"Logger({self.name!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Logger):
            return NotImplemented
        return self.name == other.name and self.registry is other.registry

    def __hash__(self) -> int:
        return hash((self.name, id(self.registry)))

    def entry(self) -> "LoggerEntry":
        """Copy of the entry's current settings."""
        return self.registry.snapshot(self.name)

    @property
    def log_level(self) -> Level:
        return self.registry.get_field(self.name, "log_level")

    @log_level.setter
    def log_level(self, level: Level) -> None:
        self.registry.set_log_level(self.name, level)

    @property
    def write_level(self) -> Level:
        return self.registry.get_field(self.name, "write_level")

    @write_level.setter
    def write_level(self, level: Level) -> None:
        self.registry.set_write_level(self.name, level)

    @property
    def directory(self) -> str:
        return self.registry.get_field(self.name, "directory")

    @directory.setter
    def directory(self, directory: str) -> None:
        self.registry.set_directory(self.name, directory)

    @property
    def processor(self) -> Processor:
        return self.registry.get_field(self.name, "processor")

    @processor.setter
    def processor(self, proc: Processor) -> None:
        self.registry.set_processor(self.name, proc)

    @property
    def ease_on_empty(self) -> bool:
        return self.registry.get_field(self.name, "ease_on_empty")

    @ease_on_empty.setter
    def ease_on_empty(self, enabled: bool) -> None:
        self.registry.set_ease_on_empty(self.name, enabled)

    def log(self, level: Level, message: str, *, stacklevel: int = 1) -> None:
        level = Level.parse(level)
        entry = self.entry()
        ctx = LogContext(
            time=local_now(),
            location=caller_location(stacklevel),
            logger=self.name,
            log_level=level,
            text=message,
        )
        file_text = route(entry, level, ctx)
        if file_text is not None:
            self.registry.files.write_line(entry.directory, file_text)
        if level is Level.FATAL:
            raise FatalError(message)

    def session(self, name: str, *, stacklevel: int = 1) -> "Session":
        """Open a root session under this entry; use it as a context manager."""
        from .session import Session

        return Session(name, self, location=caller_location(stacklevel))


__all__ = ["Loggable", "Logger", "caller_location", "route"]
