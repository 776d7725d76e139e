"""
Protocol definitions for the storage core.

The presentation layer (TUI, CLI, sync tooling) codes against these
interfaces rather than the concrete file-backed classes:
- VideoRepositoryProtocol: CRUD over the video collection
- SettingsStoreProtocol: the single settings object
- MetadataLookupProtocol: URL -> title/channel/date lookup
"""

from typing import Optional, Protocol, runtime_checkable

from .metadata import MetadataResult
from .types import Settings, Video


@runtime_checkable
class VideoRepositoryProtocol(Protocol):
    """
    Video collection operations.

    Implemented by:
    - VideoRepository (single JSON file, atomic rewrite)
    """

    # -- Read operations --

    def list(self) -> list[Video]: ...

    def find_by_id(self, id: str) -> Video: ...

    def get(self, id: str) -> Optional[Video]: ...

    def count(self) -> int: ...

    # -- Write operations --

    def create(self, draft: Video) -> Video: ...

    def update(self, video: Video) -> Video: ...

    def delete(self, id: str) -> None: ...


@runtime_checkable
class SettingsStoreProtocol(Protocol):
    """Settings load/save. Load never fails; it falls back to defaults."""

    def load(self) -> Settings: ...

    def save(self, settings: Settings) -> None: ...


@runtime_checkable
class MetadataLookupProtocol(Protocol):
    """Fetches video metadata for a URL. Failures are returned, not raised."""

    def fetch(self, url: str) -> MetadataResult: ...
