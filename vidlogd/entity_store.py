"""
Whole-file JSON persistence.

Every collection is loaded in full and rewritten in full. Reads treat a
missing file and an empty file the same way; writes always go through
the atomic writer.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from .atomic import write_file_atomic
from .errors import ParseError

logger = logging.getLogger(__name__)

FILE_MODE = 0o644


def load(path: Path) -> Optional[bytes]:
    """
    Read a file's raw contents.

    Returns None if the file does not exist or is empty.

    Raises:
        OSError: For any read failure other than a missing file.
    """
    try:
        data = Path(path).read_bytes()
    except FileNotFoundError:
        logger.debug("No file at %s", path)
        return None
    if not data:
        logger.debug("Empty file at %s", path)
        return None
    return data


def load_json(path: Path) -> Optional[Any]:
    """
    Read and decode a JSON file.

    Returns None if the file does not exist or is empty.

    Raises:
        ParseError: If the file exists but is not valid JSON.
        OSError: On read failure.
    """
    data = load(path)
    if data is None:
        return None
    try:
        return json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ParseError(path, str(e)) from e


def dumps(value: Any) -> bytes:
    """Serialize with stable key order and two-space indentation."""
    return json.dumps(value, indent=2, ensure_ascii=False).encode("utf-8")


def save_json(path: Path, value: Any) -> None:
    """
    Serialize `value` and atomically replace `path` with it.

    Raises:
        OSError: If the write fails (the file is left unchanged).
    """
    write_file_atomic(path, dumps(value), FILE_MODE)
