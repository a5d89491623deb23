"""Line writer abstractions.

``SyncWriter`` writes on the calling thread. ``BackgroundWriter`` hands the
write to a single worker so the caller only pays for an enqueue.
"""
from __future__ import annotations

import queue
import threading
import time
from typing import TYPE_CHECKING, Optional, Protocol, Tuple

from .errors import WriterClosedError
from .logutil import get_logger

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .files import LogFile


class LineWriter(Protocol):  # pragma: no cover - simple protocol
    def submit(self, handle: "LogFile", text: str) -> None: ...  # noqa: E701
    def flush(self) -> None: ...  # noqa: E701


class SyncWriter:
    def submit(self, handle: "LogFile", text: str) -> None:
        handle.write_line(text)

    def flush(self) -> None:
        pass


class BackgroundWriter:
    """Single worker draining a FIFO of ``(handle, text)`` pairs.

    The worker polls without blocking and sleeps briefly when idle. ``flush``
    closes the queue, waits for the worker to drain it and exit, then raises
    the first write failure the worker saw, if any. Anything still queued when
    the process exits without ``flush`` is lost.
    """

    def __init__(self, idle_sleep_s: float = 0.001) -> None:
        self.idle_sleep_s = idle_sleep_s
        self._queue: "queue.Queue[Tuple[LogFile, str]]" = queue.Queue()
        self._closed = threading.Event()
        self._submit_lock = threading.Lock()
        self._error: Optional[BaseException] = None
        self._thread = threading.Thread(target=self._run, name="sessionlog-writer", daemon=True)
        self._thread.start()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def submit(self, handle: "LogFile", text: str) -> None:
        # Lock keeps a submit from racing past close() into a drained queue.
        with self._submit_lock:
            if self._closed.is_set():
                raise WriterClosedError("background writer already flushed")
            self._queue.put((handle, text))

    def _run(self) -> None:
        while True:
            try:
                handle, text = self._queue.get_nowait()
            except queue.Empty:
                if self._closed.is_set():
                    break
                time.sleep(self.idle_sleep_s)
                continue
            try:
                handle.write_line(text)
            except Exception as exc:  # noqa: BLE001 - re-raised from flush()
                get_logger().error("background write to %s failed: %s", handle.path, exc)
                if self._error is None:
                    self._error = exc

    def flush(self) -> None:
        with self._submit_lock:
            self._closed.set()
        self._thread.join()
        if self._error is not None:
            error, self._error = self._error, None
            raise error


__all__ = ["LineWriter", "SyncWriter", "BackgroundWriter"]
