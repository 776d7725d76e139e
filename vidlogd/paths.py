"""
Per-user data directory resolution.

Priority:
1. VIDLOGD_DATA_DIR (used as-is)
2. XDG_DATA_HOME/vidlogd
3. Platform default: %APPDATA%\\vidlogd (or ~/AppData/Roaming) on Windows,
   ~/.local/share/vidlogd elsewhere
"""

import os
import platform
from pathlib import Path
from typing import Optional

APP_NAME = "vidlogd"


def _default_data_root() -> Path:
    """Platform-convention root for application data."""
    if platform.system() == "Windows":
        app_data = os.environ.get("APPDATA")
        if app_data:
            return Path(app_data)
        return Path.home() / "AppData" / "Roaming"
    return Path.home() / ".local" / "share"


def resolve_data_dir() -> Path:
    """Resolve the data directory without touching the filesystem."""
    override = os.environ.get("VIDLOGD_DATA_DIR")
    if override:
        return Path(override).expanduser()

    xdg_data_home = os.environ.get("XDG_DATA_HOME")
    if xdg_data_home:
        return Path(xdg_data_home).expanduser() / APP_NAME

    return _default_data_root() / APP_NAME


def get_data_dir(data_dir: Optional[Path] = None) -> Path:
    """
    Return the data directory, creating it if absent.

    Raises:
        OSError: If the directory cannot be created or the home directory
            cannot be determined.
    """
    path = Path(data_dir) if data_dir is not None else resolve_data_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path
