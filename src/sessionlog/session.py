"""Sessions: scoped, nestable logging contexts.

A session prints its messages to the console as they happen but holds the
file renderings in a buffer. When it completes it renders the buffer into a
box report and hands the report to its parent's buffer, or to the log file
when it has no parent. Completion runs once; use sessions as context
managers so every exit path, exceptions included, completes them::

    with logger.session("load") as s:
        s.info("reading config")
        with s.session("parse") as child:
            child.info("3 sections")

Console output keeps call order. File output for a session arrives in one
batch when it completes, so root-level lines written while it was open can
precede it in the file.
"""
from __future__ import annotations

import threading
import time
from typing import TYPE_CHECKING, List, NamedTuple, Optional, Tuple, Union

from .config import BOX_WIDTH, SESSION_MARKER_LEVEL
from .context import Location, LogContext, SessionEndContext, SessionStartContext, local_now
from .errors import FatalError, SessionDiedError
from .level import Level
from .logger import Loggable, caller_location, route
from .logutil import get_logger

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .logger import Logger
    from .registry import LoggerEntry

TOP_BORDER = "┏" + "━" * BOX_WIDTH
BOTTOM_BORDER = "┗" + "━" * BOX_WIDTH
VERTICAL = "┃"

# Column where the collapsed summary line gets ``root:name - ``: the default
# processor's 32-char timestamp plus the 5-space marker padding.
NAME_SPLICE_OFFSET = 37


class BoxLine(NamedTuple):
    text: str
    border: bool = False


# A buffered item: a raw (possibly multi-line) message, or a child's report.
Entry = Union[str, Tuple[BoxLine, ...]]


class SessionBuffer:
    """Ordered, lock-guarded entries shared between a session and its children."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: List[Entry] = []
        self._sealed = False

    @property
    def sealed(self) -> bool:
        with self._lock:
            return self._sealed

    def append(self, entry: Entry) -> None:
        with self._lock:
            self._entries.append(entry)

    def offer(self, entry: Entry) -> bool:
        """Append ``entry``; False if the owner already completed."""
        with self._lock:
            if self._sealed:
                return False
            self._entries.append(entry)
            return True

    def seal(self) -> List[Entry]:
        """Stop accepting entries and hand over the contents."""
        with self._lock:
            self._sealed = True
            entries, self._entries = self._entries, []
            return entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def _nest(line: BoxLine) -> BoxLine:
    if line.border:
        # one glyph shorter so the width stays BOX_WIDTH + 1 at every depth
        return BoxLine(VERTICAL + line.text[:-1], True)
    return BoxLine(VERTICAL + line.text)


def render_box(name: str, elapsed_us: int, content: List[Entry]) -> Tuple[BoxLine, ...]:
    lines = [
        BoxLine(TOP_BORDER, True),
        BoxLine(f"{VERTICAL} Session: {name}"),
        BoxLine(f"{VERTICAL} Elapsed: {elapsed_us}us"),
        BoxLine(VERTICAL),
    ]
    for item in content:
        if isinstance(item, str):
            lines.extend(BoxLine(f"{VERTICAL} {line}") for line in item.split("\n"))
        else:
            lines.extend(_nest(line) for line in item)
    lines.append(BoxLine(BOTTOM_BORDER, True))
    return tuple(lines)


def report_text(report: Entry) -> str:
    if isinstance(report, str):
        return report
    return "\n".join(line.text for line in report)


def collapse_line(end_line: str, identity: str, elapsed_us: int) -> str:
    head, tail = end_line[:NAME_SPLICE_OFFSET], end_line[NAME_SPLICE_OFFSET:]
    return f"{head}{identity} - {tail}, Elapsed: {elapsed_us}us"


class Session(Loggable):
    def __init__(
        self,
        name: str,
        root: "Logger",
        parent: Optional["Session"] = None,
        location: Optional[Location] = None,
    ) -> None:
        self.name = name
        self.root = root
        self.location = location or caller_location(1)
        self.start_time = local_now()
        self._start_ns = time.perf_counter_ns()
        self._buffer = SessionBuffer()
        # Buffers of every ancestor, nearest first; the sessions themselves
        # are not retained.
        self._ancestors: Tuple[SessionBuffer, ...] = ()
        if parent is not None:
            self._ancestors = (parent._buffer,) + parent._ancestors
        self._died = False
        self._paused = False
        self._complete_lock = threading.Lock()

        entry = root.entry()
        ctx = SessionStartContext(
            time=self.start_time,
            location=self.location,
            logger=root.name,
            session_name=name,
        )
        route(entry, SESSION_MARKER_LEVEL, ctx)

    def __repr__(self) -> str:
        return f"Session({self.root.name}:{self.name})"

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close(stacklevel=2)

    @property
    def died(self) -> bool:
        return self._died

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def buffer(self) -> SessionBuffer:
        return self._buffer

    def disable(self) -> None:
        self._paused = True

    def enable(self) -> None:
        self._paused = False

    def session(self, name: str, *, stacklevel: int = 1) -> "Session":
        """Open a child session whose report lands inside this one.

        Raises ``SessionDiedError`` if this session or any of its ancestors
        has already completed.
        """
        if self._died or any(buffer.sealed for buffer in self._ancestors):
            raise SessionDiedError(f"session {self.root.name}:{self.name} or an ancestor already completed")
        return Session(name, self.root, parent=self, location=caller_location(stacklevel))

    def log(self, level: Level, message: str, *, stacklevel: int = 1) -> None:
        if self._died or self._paused:
            return
        level = Level.parse(level)
        entry = self.root.entry()
        ctx = LogContext(
            time=local_now(),
            location=caller_location(stacklevel),
            logger=self.root.name,
            log_level=level,
            text=message,
            session_name=self.name,
        )
        file_text = route(entry, level, ctx)
        if file_text is not None:
            self._buffer.append(file_text)
        if level is Level.FATAL:
            raise FatalError(message)

    def close(self, *, stacklevel: int = 1) -> None:
        """Complete the session. Later calls do nothing."""
        with self._complete_lock:
            if self._died:
                return
            self._died = True
            content = self._buffer.seal()

        elapsed_us = (time.perf_counter_ns() - self._start_ns) // 1000
        entry = self.root.entry()
        ctx = SessionEndContext(
            time=local_now(),
            location=caller_location(stacklevel),
            logger=self.root.name,
            session_name=self.name,
            elapsed_us=elapsed_us,
        )
        end_line = route(entry, SESSION_MARKER_LEVEL, ctx)
        report = self._render(entry, content, end_line, elapsed_us)
        if report is None:
            return

        if self._ancestors:
            if self._ancestors[0].offer(report):
                return
            get_logger().warning(
                "parent of session %s:%s completed first; writing its report directly",
                self.root.name,
                self.name,
            )
        self.root.registry.files.write_line(entry.directory, report_text(report))

    def _render(
        self,
        entry: "LoggerEntry",
        content: List[Entry],
        end_line: Optional[str],
        elapsed_us: int,
    ) -> Optional[Entry]:
        if not content:
            if end_line is None:
                return None
            if entry.ease_on_empty:
                return collapse_line(end_line, f"{self.root.name}:{self.name}", elapsed_us)
        return render_box(self.name, elapsed_us, content)


__all__ = [
    "Session",
    "SessionBuffer",
    "BoxLine",
    "render_box",
    "report_text",
    "collapse_line",
    "TOP_BORDER",
    "BOTTOM_BORDER",
]
