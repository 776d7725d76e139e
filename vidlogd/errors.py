"""
Error types and error logging for vidlogd.

IO failures are not wrapped: they surface as the built-in OSError.
The CLI logs full stack traces for debugging while showing clean
messages to users.
"""

import os
import traceback
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .config import StoreConfig
from .paths import resolve_data_dir


class VidlogError(Exception):
    """Base class for vidlogd errors."""


class NotFoundError(VidlogError, LookupError):
    """No video with the given id exists in the collection."""

    def __init__(self, id: str):
        self.id = id
        super().__init__(f"Video with ID {id} not found")


class ValidationError(VidlogError, ValueError):
    """A field is malformed at construction time."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class ParseError(VidlogError, ValueError):
    """A persisted file exists but is not well-formed."""

    def __init__(self, path: Path, message: str):
        self.path = Path(path)
        super().__init__(f"Failed to parse {self.path}: {message}")


def error_log_path(data_dir: Optional[Path] = None) -> Path:
    """Crash log location: vidlogd-errors.log inside the store's data dir."""
    root = Path(data_dir) if data_dir is not None else resolve_data_dir()
    return StoreConfig(path=root).error_log_path


def log_exception(exc: BaseException, context: str = "", data_dir: Optional[Path] = None) -> Path:
    """
    Append an exception's traceback to the crash log.

    The log is opened append-only with owner-only permissions. Failing to
    write it never raises; the path is returned either way so the caller
    can point the user at it.

    Args:
        exc: The exception that occurred
        context: Short label written with the timestamp (e.g. command name)
        data_dir: Store directory; resolved like the store's own when None
    """
    log_path = error_log_path(data_dir)
    header = f"[{datetime.now(timezone.utc).isoformat()}] {context}".rstrip()
    entry = "".join([
        "\n", "=" * 60, "\n", header, "\n",
        *traceback.format_exception(type(exc), exc, exc.__traceback__),
    ])
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(log_path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
        with os.fdopen(fd, "a", encoding="utf-8") as f:
            f.write(entry)
    except OSError:
        pass  # A crash report must not crash
    return log_path
