"""Error kinds and the exceptions that carry them."""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    DIFFERENT_LEVEL = "different_level"
    DIFFERENT_DIRECTORY = "different_directory"
    FAILED_TO_CREATE_FOLDER = "failed_to_create_folder"


class SessionErrorKind(Enum):
    SESSION_DIED = "session_died"


class SessionLogError(Exception):
    """Base class; ``kind`` identifies the failure when one applies."""

    kind: Optional[Enum] = None


class DifferentLevelError(SessionLogError):
    kind = ErrorKind.DIFFERENT_LEVEL


class DifferentDirectoryError(SessionLogError):
    kind = ErrorKind.DIFFERENT_DIRECTORY


class FailedToCreateFolderError(SessionLogError):
    kind = ErrorKind.FAILED_TO_CREATE_FOLDER

    def __init__(self, directory: str, reason: str = "") -> None:
        self.directory = directory
        msg = f"failed to create log folder {directory!r}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class SessionDiedError(SessionLogError):
    kind = SessionErrorKind.SESSION_DIED


class WriterClosedError(SessionLogError):
    """Raised when submitting to a background writer that was flushed."""


class FatalError(SessionLogError):
    """Raised after a message is recorded at ``Level.FATAL``."""


__all__ = [
    "ErrorKind",
    "SessionErrorKind",
    "SessionLogError",
    "DifferentLevelError",
    "DifferentDirectoryError",
    "FailedToCreateFolderError",
    "SessionDiedError",
    "WriterClosedError",
    "FatalError",
]
