"""
Settings persistence.

A missing settings file is created with the defaults on first load. A
file that exists but cannot be parsed yields the defaults without being
overwritten, so a hand-edited file with a typo is never destroyed.
"""

import logging
from pathlib import Path

from .entity_store import load_json, save_json
from .errors import ParseError
from .types import Settings, default_settings

logger = logging.getLogger(__name__)


class SettingsStore:
    """Load/save the single Settings object."""

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Settings:
        """
        Return the persisted settings, falling back to the defaults.

        Never raises for a missing or corrupt file.
        """
        if not self._path.exists():
            defaults = default_settings()
            try:
                self.save(defaults)
                logger.info("Created default settings at %s", self._path)
            except OSError as e:
                logger.warning("Could not write default settings to %s: %s", self._path, e)
            return defaults

        try:
            data = load_json(self._path)
        except (ParseError, OSError) as e:
            logger.warning("Using default settings, %s is unreadable: %s", self._path, e)
            return default_settings()

        if data is None:
            # Zero-length file: treated like a corrupt one and left alone
            logger.warning("Using default settings, %s is empty", self._path)
            return default_settings()

        try:
            return Settings.from_dict(data)
        except TypeError as e:
            logger.warning("Using default settings, %s is malformed: %s", self._path, e)
            return default_settings()

    def save(self, settings: Settings) -> None:
        """
        Atomically write settings. Field contents are not validated.

        Raises:
            OSError: If the write fails.
        """
        save_json(self._path, settings.to_dict())
        logger.debug("Saved settings to %s", self._path)
