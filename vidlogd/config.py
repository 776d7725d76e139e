"""
Store configuration.

A store is one per-user data directory holding the video collection and
the settings file. The location is resolved by `paths`; everything else
is derived from it.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .paths import get_data_dir


VIDEOS_FILENAME = "videos.json"
SETTINGS_FILENAME = "settings.json"
OPS_LOG_FILENAME = "vidlogd-ops.log"
ERROR_LOG_FILENAME = "vidlogd-errors.log"

# Environment variables
ENV_DATA_DIR = "VIDLOGD_DATA_DIR"
ENV_VERBOSE = "VIDLOGD_VERBOSE"
ENV_YOUTUBE_API_KEY = "YOUTUBE_API_KEY"


@dataclass
class StoreConfig:
    """Resolved locations of a store's files."""
    path: Path

    @property
    def videos_path(self) -> Path:
        """Path to the video collection (JSON array)."""
        return self.path / VIDEOS_FILENAME

    @property
    def settings_path(self) -> Path:
        """Path to the settings object."""
        return self.path / SETTINGS_FILENAME

    @property
    def ops_log_path(self) -> Path:
        return self.path / OPS_LOG_FILENAME

    @property
    def error_log_path(self) -> Path:
        return self.path / ERROR_LOG_FILENAME

    def exists(self) -> bool:
        """Check if the video collection file exists."""
        return self.videos_path.exists()


def load_store_config(data_dir: Optional[Path] = None) -> StoreConfig:
    """
    Resolve the store directory and create it if needed.

    This is the main entry point for config management.

    Raises:
        OSError: If the directory cannot be resolved or created.
    """
    return StoreConfig(path=get_data_dir(data_dir))


def is_verbose() -> bool:
    """True when debug logging is requested via the environment."""
    return os.environ.get(ENV_VERBOSE) == "1"


def youtube_api_key_from_env() -> str:
    return os.environ.get(ENV_YOUTUBE_API_KEY, "")
