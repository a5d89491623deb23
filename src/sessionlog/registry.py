"""Process-wide table of logger entries.

A single lock guards the table. It is held for one field read or write at a
time and never across I/O or a processor call. Directory creation happens
outside the lock before the new directory is published.

Most applications use the lazily created default registry through the
module-level helpers; tests build their own ``Registry`` for isolation.
"""
from __future__ import annotations

import os
import threading
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from .config import Defaults
from .context import Processor
from .errors import DifferentDirectoryError, DifferentLevelError, FailedToCreateFolderError
from .files import FileManager
from .level import Level
from .logger import Logger
from .writers import BackgroundWriter


@dataclass
class LoggerEntry:
    name: str
    log_level: Level
    write_level: Level
    directory: str
    processor: Processor
    ease_on_empty: bool = True


def _make_dir(directory: str) -> None:
    try:
        os.makedirs(directory, exist_ok=True)
    except OSError as exc:
        raise FailedToCreateFolderError(directory, str(exc)) from exc


def _same_dir(a: str, b: str) -> bool:
    return os.path.normpath(a) == os.path.normpath(b)


class Registry:
    def __init__(self, defaults: Optional[Defaults] = None, files: Optional[FileManager] = None) -> None:
        self._lock = threading.Lock()
        self._entries: Dict[str, LoggerEntry] = {}
        self._defaults = replace(defaults) if defaults else Defaults()
        if files is None:
            files = FileManager(writer=BackgroundWriter() if self._defaults.background else None)
        self.files = files

    # -- defaults -----------------------------------------------------------
    @property
    def defaults(self) -> Defaults:
        with self._lock:
            return replace(self._defaults)

    def configure(self, defaults: Defaults) -> None:
        """Replace the defaults used for entries created from now on.

        The ``background`` flag is fixed when the registry is built.
        """
        with self._lock:
            self._defaults = replace(defaults)

    def set_default_directory(self, directory: str) -> None:
        with self._lock:
            self._defaults.directory = directory

    def set_default_level(self, level: Level) -> None:
        level = Level.parse(level)
        with self._lock:
            self._defaults.log_level = level

    def set_default_write_level(self, level: Level) -> None:
        level = Level.parse(level)
        with self._lock:
            self._defaults.write_level = level

    def set_default_processor(self, proc: Processor) -> None:
        with self._lock:
            self._defaults.processor = proc

    def set_default_ease_on_empty(self, enabled: bool) -> None:
        with self._lock:
            self._defaults.ease_on_empty = bool(enabled)

    # -- entries ------------------------------------------------------------
    def _new_entry(self, name: str, **overrides: Any) -> LoggerEntry:
        d = self._defaults
        entry = LoggerEntry(
            name=name,
            log_level=d.log_level,
            write_level=d.write_level,
            directory=d.directory,
            processor=d.processor,
            ease_on_empty=d.ease_on_empty,
        )
        for key, value in overrides.items():
            setattr(entry, key, value)
        return entry

    def get_or_create(self, name: str) -> Logger:
        with self._lock:
            if name not in self._entries:
                self._entries[name] = self._new_entry(name)
        return Logger(name, self)

    def with_options(
        self,
        name: str,
        level: Level,
        directory: str,
        write_level: Optional[Level] = None,
    ) -> Logger:
        """Create ``name`` with the given options, or verify an existing entry.

        ``level`` sets both thresholds of a new entry unless ``write_level`` is
        given; an existing entry is checked only against the levels passed. Raises
        ``DifferentLevelError`` / ``DifferentDirectoryError`` when an existing
        entry disagrees, ``FailedToCreateFolderError`` when the directory
        cannot be created for a new entry.
        """
        return self._with_options(name, level, directory, write_level, strict=True)

    def with_options_lenient(
        self,
        name: str,
        level: Level,
        directory: str,
        write_level: Optional[Level] = None,
    ) -> Logger:
        """Like ``with_options`` but an existing entry is returned unchanged."""
        return self._with_options(name, level, directory, write_level, strict=False)

    def _with_options(
        self,
        name: str,
        level: Level,
        directory: str,
        write_level: Optional[Level],
        strict: bool,
    ) -> Logger:
        log_level = Level.parse(level)
        requested_write = Level.parse(write_level) if write_level is not None else None

        with self._lock:
            existing = self._entries.get(name)
            existing = replace(existing) if existing else None

        if existing is None:
            _make_dir(directory)
            with self._lock:
                entry = self._entries.get(name)
                if entry is None:
                    self._entries[name] = self._new_entry(
                        name,
                        log_level=log_level,
                        write_level=requested_write if requested_write is not None else log_level,
                        directory=directory,
                    )
                    return Logger(name, self)
                existing = replace(entry)

        if strict:
            # Only the thresholds the caller passed are compared.
            if existing.log_level != log_level:
                raise DifferentLevelError(
                    f"logger {name!r} exists with level {existing.log_level.name}, requested {log_level.name}"
                )
            if requested_write is not None and existing.write_level != requested_write:
                raise DifferentLevelError(
                    f"logger {name!r} exists with write level {existing.write_level.name}, "
                    f"requested {requested_write.name}"
                )
            if not _same_dir(existing.directory, directory):
                raise DifferentDirectoryError(
                    f"logger {name!r} exists with directory {existing.directory!r}, requested {directory!r}"
                )
        return Logger(name, self)

    def names(self) -> List[str]:
        with self._lock:
            return list(self._entries)

    def snapshot(self, name: str) -> LoggerEntry:
        with self._lock:
            return replace(self._entries[name])

    def get_field(self, name: str, field_name: str) -> Any:
        with self._lock:
            return getattr(self._entries[name], field_name)

    def _set_field(self, name: str, field_name: str, value: Any) -> None:
        with self._lock:
            setattr(self._entries[name], field_name, value)

    def set_log_level(self, name: str, level: Level) -> None:
        self._set_field(name, "log_level", Level.parse(level))

    def set_write_level(self, name: str, level: Level) -> None:
        self._set_field(name, "write_level", Level.parse(level))

    def set_directory(self, name: str, directory: str) -> None:
        """Point ``name`` at ``directory``, creating it first."""
        if not _same_dir(self.get_field(name, "directory"), directory):
            _make_dir(directory)
        self._set_field(name, "directory", directory)

    def set_processor(self, name: str, proc: Processor) -> None:
        self._set_field(name, "processor", proc)

    def set_ease_on_empty(self, name: str, enabled: bool) -> None:
        self._set_field(name, "ease_on_empty", bool(enabled))

    # -- output ---------------------------------------------------------------
    def flush(self) -> None:
        """Wait for queued file writes; required before exit in background mode."""
        self.files.flush()

    def close(self) -> None:
        self.files.close()


_DEFAULT: Optional[Registry] = None
_DEFAULT_LOCK = threading.Lock()


def default_registry() -> Registry:
    global _DEFAULT
    with _DEFAULT_LOCK:
        if _DEFAULT is None:
            _DEFAULT = Registry()
        return _DEFAULT


def set_default_registry(registry: Optional[Registry]) -> Optional[Registry]:
    """Swap the default registry (``None`` resets it lazily); returns the old one."""
    global _DEFAULT
    with _DEFAULT_LOCK:
        previous, _DEFAULT = _DEFAULT, registry
        return previous


def get_or_create(name: str) -> Logger:
    return default_registry().get_or_create(name)


def with_options(name: str, level: Level, directory: str, write_level: Optional[Level] = None) -> Logger:
    return default_registry().with_options(name, level, directory, write_level)


def with_options_lenient(name: str, level: Level, directory: str, write_level: Optional[Level] = None) -> Logger:
    return default_registry().with_options_lenient(name, level, directory, write_level)


def set_default_directory(directory: str) -> None:
    default_registry().set_default_directory(directory)


def get_default_directory() -> str:
    return default_registry().defaults.directory


def set_default_level(level: Level) -> None:
    default_registry().set_default_level(level)


def get_default_level() -> Level:
    return default_registry().defaults.log_level


def set_default_write_level(level: Level) -> None:
    default_registry().set_default_write_level(level)


def set_default_processor(proc: Processor) -> None:
    default_registry().set_default_processor(proc)


def get_default_processor() -> Processor:
    return default_registry().defaults.processor


def flush() -> None:
    default_registry().flush()


__all__ = [
    "LoggerEntry",
    "Registry",
    "default_registry",
    "set_default_registry",
    "get_or_create",
    "with_options",
    "with_options_lenient",
    "set_default_directory",
    "get_default_directory",
    "set_default_level",
    "get_default_level",
    "set_default_write_level",
    "set_default_processor",
    "get_default_processor",
    "flush",
]
