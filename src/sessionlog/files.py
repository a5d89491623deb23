"""Hour-bucketed log files.

One open handle per directory. The handle is replaced when the wall-clock
``(year, month, day, hour)`` bucket moves past the one it was opened for.
"""
from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple

from .context import local_now
from .errors import WriterClosedError
from .logutil import get_logger
from .writers import LineWriter, SyncWriter

Bucket = Tuple[int, int, int, int]


def bucket_of(now: datetime) -> Bucket:
    return (now.year, now.month, now.day, now.hour)


def file_name(bucket: Bucket) -> str:
    y, m, d, h = bucket
    return f"{y:04d}-{m:02d}-{d:02d}-{h:02d}.log"


class LogFile:
    """An append-mode file shared by every writer of one directory.

    Writes are serialized by a per-handle lock. Callers ``reserve`` before
    handing the handle to a writer; each ``write_line`` (or ``release``)
    returns the reservation. A retired handle closes once nothing is reserved.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._fh = open(path, "a", encoding="utf-8")
        self._lock = threading.Lock()
        self._pending = 0
        self._retired = False

    @property
    def closed(self) -> bool:
        return self._fh.closed

    def reserve(self) -> None:
        with self._lock:
            self._pending += 1

    def release(self) -> None:
        with self._lock:
            self._pending -= 1
            self._close_if_done()

    def write_line(self, text: str) -> None:
        with self._lock:
            try:
                self._fh.write(text + "\n")
                self._fh.flush()
            finally:
                self._pending -= 1
                self._close_if_done()

    def retire(self) -> None:
        with self._lock:
            self._retired = True
            self._close_if_done()

    def _close_if_done(self) -> None:
        if self._retired and self._pending <= 0 and not self._fh.closed:
            self._fh.close()


@dataclass
class _Cached:
    bucket: Bucket
    handle: LogFile


class FileManager:
    def __init__(
        self,
        writer: Optional[LineWriter] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.writer: LineWriter = writer or SyncWriter()
        self._clock = clock or local_now
        self._lock = threading.Lock()
        self._handles: Dict[str, _Cached] = {}

    def current_path(self, directory: str) -> Optional[str]:
        """Path of the cached handle for ``directory``, if one is open."""
        with self._lock:
            cached = self._handles.get(os.path.normpath(directory))
            return cached.handle.path if cached else None

    def _acquire(self, directory: str) -> LogFile:
        key = os.path.normpath(directory)
        bucket = bucket_of(self._clock())
        with self._lock:
            cached = self._handles.get(key)
            if cached is None or cached.bucket != bucket:
                os.makedirs(key, exist_ok=True)
                handle = LogFile(os.path.join(key, file_name(bucket)))
                if cached is not None:
                    get_logger().debug("rotating %s -> %s", cached.handle.path, handle.path)
                    cached.handle.retire()
                cached = _Cached(bucket, handle)
                self._handles[key] = cached
            cached.handle.reserve()
            return cached.handle

    def write_line(self, directory: str, text: str) -> None:
        handle = self._acquire(directory)
        try:
            self.writer.submit(handle, text)
        except WriterClosedError:
            handle.release()
            raise

    def flush(self) -> None:
        self.writer.flush()

    def close(self) -> None:
        """Flush the writer and retire every cached handle."""
        self.writer.flush()
        with self._lock:
            for cached in self._handles.values():
                cached.handle.retire()
            self._handles.clear()


__all__ = ["Bucket", "bucket_of", "file_name", "LogFile", "FileManager"]
