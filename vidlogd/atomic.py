"""
Crash-safe file replacement.

A reader of the destination sees either the complete previous contents
or the complete new contents, never a partial write. The data goes to a
temporary file in the same directory (same filesystem, so the rename is
atomic), is fsynced, and is renamed over the destination. The directory
is then fsynced so the rename itself survives a crash.

os.replace overwrites an existing destination on every supported
platform, so there is no remove-then-rename window. On filesystems that
do not implement rename atomically (some network mounts) the guarantee
is only as strong as the filesystem's.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

TEMP_PREFIX = "tmp-"


def write_file_atomic(path: Union[str, Path], data: bytes, mode: int = 0o644) -> None:
    """
    Atomically replace `path` with `data`.

    Args:
        path: Destination file
        data: Complete new contents
        mode: Permission bits for the new file

    Raises:
        OSError: On any failure. The destination is unchanged unless the
            failure happened while syncing the directory after the rename.
    """
    path = Path(path)
    directory = path.parent
    directory.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f"{TEMP_PREFIX}{path.name}")
    try:
        with os.fdopen(fd, "wb") as f:
            os.chmod(tmp_name, mode)
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            logger.debug("Could not remove temp file %s", tmp_name)
        raise

    _sync_directory(directory)
    logger.debug("Wrote %d bytes to %s", len(data), path)


def _sync_directory(directory: Path) -> None:
    """Flush directory metadata so a completed rename is durable."""
    if os.name == "nt":
        # No directory handle to fsync on Windows
        return
    dir_fd = os.open(directory, os.O_RDONLY)
    try:
        os.fsync(dir_fd)
    finally:
        os.close(dir_fd)
