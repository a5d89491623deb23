"""sessionlog: named loggers with hour-bucketed files and buffered sessions.

Expose a single source of truth for the version. Prefer reading from
importlib.metadata so that an editable install or wheel always reports
the version declared in pyproject.toml. Fallback to a hardcoded string
to avoid import errors when metadata is unavailable (e.g. direct source
usage without installation).
"""

from __future__ import annotations

from importlib import metadata as _metadata

from .config import Defaults, load_defaults
from .context import Context, Location, LogContext, SessionEndContext, SessionStartContext, processor
from .errors import (
    DifferentDirectoryError,
    DifferentLevelError,
    ErrorKind,
    FailedToCreateFolderError,
    FatalError,
    SessionDiedError,
    SessionErrorKind,
    SessionLogError,
    WriterClosedError,
)
from .level import Level
from .logger import Loggable, Logger
from .registry import (
    Registry,
    default_registry,
    flush,
    get_default_directory,
    get_default_level,
    get_default_processor,
    get_or_create,
    set_default_directory,
    set_default_level,
    set_default_processor,
    set_default_registry,
    set_default_write_level,
    with_options,
    with_options_lenient,
)
from .session import Session

__all__ = [
    "__version__",
    "Context",
    "Defaults",
    "DifferentDirectoryError",
    "DifferentLevelError",
    "ErrorKind",
    "FailedToCreateFolderError",
    "FatalError",
    "Level",
    "Location",
    "LogContext",
    "Loggable",
    "Logger",
    "Registry",
    "Session",
    "SessionDiedError",
    "SessionEndContext",
    "SessionErrorKind",
    "SessionLogError",
    "SessionStartContext",
    "WriterClosedError",
    "default_registry",
    "flush",
    "get_default_directory",
    "get_default_level",
    "get_default_processor",
    "get_or_create",
    "load_defaults",
    "processor",
    "set_default_directory",
    "set_default_level",
    "set_default_processor",
    "set_default_registry",
    "set_default_write_level",
    "with_options",
    "with_options_lenient",
]

_FALLBACK_VERSION = "0.1.0"  # MUST match pyproject.toml [project].version

try:  # pragma: no cover - success path covered indirectly via CLI test
    __version__ = _metadata.version("sessionlog")  # type: ignore[assignment]
except Exception:  # pragma: no cover - fallback exercised if metadata missing
    __version__ = _FALLBACK_VERSION
