"""Emission events and the default processor.

Every log call, session start and session end is described by a context. A
processor turns a context into a pair of strings: the console rendering and
the file rendering. Processors are plain callables, so closures work too.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Tuple

from .level import Level


@dataclass(frozen=True)
class Location:
    file: str
    line: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class Context:
    time: datetime
    location: Location
    logger: str

    def level(self) -> Optional[Level]:
        return None

    def session(self) -> Optional[str]:
        return None

    def message(self) -> str:
        raise NotImplementedError

    def time_str(self) -> str:
        """RFC 3339 timestamp with microseconds and the local UTC offset."""
        return self.time.isoformat(timespec="microseconds")

    def name(self) -> str:
        """``logger`` for root-level events, ``logger:session`` otherwise."""
        session = self.session()
        if session is None:
            return self.logger
        return f"{self.logger}:{session}"

    def location_str(self) -> str:
        return str(self.location)


@dataclass(frozen=True)
class LogContext(Context):
    log_level: Level
    text: str
    session_name: Optional[str] = None

    def level(self) -> Optional[Level]:
        return self.log_level

    def session(self) -> Optional[str]:
        return self.session_name

    def message(self) -> str:
        return self.text


@dataclass(frozen=True)
class SessionStartContext(Context):
    session_name: str

    def session(self) -> Optional[str]:
        return self.session_name

    def message(self) -> str:
        return "Session start"


@dataclass(frozen=True)
class SessionEndContext(Context):
    session_name: str
    elapsed_us: int

    def session(self) -> Optional[str]:
        return self.session_name

    def message(self) -> str:
        return "Session end"


Processor = Callable[[Context], Tuple[str, str]]


def local_now() -> datetime:
    """Current wall-clock time, timezone-aware in the local zone."""
    return datetime.now().astimezone()


def processor(ctx: Context) -> Tuple[str, str]:
    """Default processor: ``(console_text, file_text)``.

    Inside a session the file rendering drops the name, since the enclosing
    report already carries it.
    """
    time = ctx.time_str()
    name = ctx.name()
    loc = ctx.location_str()

    if isinstance(ctx, LogContext):
        level = ctx.log_level
        console = f"{time} {level.colored()} {name} - {loc} - {ctx.text}"
        if ctx.session_name is None:
            return console, f"{time} {level.tag} {name} - {loc} - {ctx.text}"
        return console, f"{time} {level.tag} {loc} - {ctx.text}"

    if isinstance(ctx, SessionStartContext):
        return (
            f"{time}     {name} - {loc} - Session start",
            f"{time}     {loc} - Session start",
        )

    if isinstance(ctx, SessionEndContext):
        return (
            f"{time}     {name} - {loc} - Session end, Elapsed: {ctx.elapsed_us}us",
            f"{time}     {loc} - Session end",
        )

    raise TypeError(f"unsupported context: {type(ctx).__name__}")


__all__ = [
    "Location",
    "Context",
    "LogContext",
    "SessionStartContext",
    "SessionEndContext",
    "Processor",
    "processor",
    "local_now",
]
