"""
Video repository backed by a single JSON file.

The collection file is the source of truth for:
- Video identity (random hex id)
- Entry fields as entered by the user
- created_at timestamps

Every operation reads the whole collection. Mutations change it in
memory, re-sort it (newest log date first) and rewrite the whole file
atomically. There is no cross-process locking: two processes writing at
once can lose an update (last writer wins), but the file is never left
half-written.
"""

from __future__ import annotations

import functools
import logging
import secrets
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

from .entity_store import load_json, save_json
from .errors import NotFoundError, ParseError
from .types import Video, utc_now_dt

logger = logging.getLogger(__name__)

ID_BYTES = 8


def generate_id() -> str:
    """New random id: 8 bytes from the OS CSPRNG, hex encoded."""
    return secrets.token_hex(ID_BYTES)


def _descending(a: Any, b: Any) -> int:
    if a > b:
        return -1
    if a < b:
        return 1
    return 0


def compare_videos(a: Video, b: Video) -> int:
    """
    Order by log date, most recent first.

    If either log date in the pair is unparsable, that pair is ordered by
    created_at instead, also most recent first.
    """
    logged_a, logged_b = a.logged_at, b.logged_at
    if logged_a is None or logged_b is None:
        return _descending(a.created_at, b.created_at)
    return _descending(logged_a, logged_b)


def sort_videos(videos: list[Video]) -> list[Video]:
    """Sort in place by log date (descending) and return the list."""
    videos.sort(key=functools.cmp_to_key(compare_videos))
    return videos


class VideoRepository:
    """
    CRUD over the video collection file.

    Not safe for concurrent writers in different processes; calls within
    one process are plain synchronous request/response.
    """

    def __init__(
        self,
        path: Path,
        *,
        clock: Callable[[], datetime] = utc_now_dt,
        id_factory: Callable[[], str] = generate_id,
    ):
        """
        Args:
            path: Path to the collection file (created on first write)
            clock: Source of created_at timestamps
            id_factory: Source of new ids
        """
        self._path = Path(path)
        self._clock = clock
        self._id_factory = id_factory

    @property
    def path(self) -> Path:
        return self._path

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def _load_raw(self) -> list[Any]:
        data = load_json(self._path)
        if data is None:
            return []
        if not isinstance(data, list):
            raise ParseError(self._path, f"expected a JSON array, got {type(data).__name__}")
        return data

    def _load_all(self) -> list[Video]:
        records = self._load_raw()
        try:
            return [Video.from_dict(record) for record in records]
        except (TypeError, ValueError) as e:
            raise ParseError(self._path, str(e)) from e

    def _save_all(self, videos: list[Video]) -> None:
        sort_videos(videos)
        save_json(self._path, [v.to_dict() for v in videos])
        logger.debug("Saved %d videos to %s", len(videos), self._path)

    # -------------------------------------------------------------------------
    # Read Operations
    # -------------------------------------------------------------------------

    def list(self) -> list[Video]:
        """
        All entries, most recently logged first.

        Raises:
            ParseError: If the collection file is malformed.
            OSError: If it cannot be read.
        """
        return sort_videos(self._load_all())

    def find_by_id(self, id: str) -> Video:
        """
        Look up one entry.

        Raises:
            NotFoundError: If no entry has this id.
        """
        for video in self._load_all():
            if video.id == id:
                return video
        raise NotFoundError(id)

    def count(self) -> int:
        """Number of entries, without building Video objects."""
        return len(self._load_raw())

    # -------------------------------------------------------------------------
    # Write Operations
    # -------------------------------------------------------------------------

    def create(self, draft: Video) -> Video:
        """
        Store a new entry.

        Assigns a fresh id (any id on the draft is ignored) and stamps
        created_at with the current time.

        Returns:
            The stored Video

        Raises:
            ValidationError: If the draft's log date or rating is malformed.
        """
        draft.validate()
        videos = self._load_all()

        existing_ids = {v.id for v in videos}
        new_id = self._id_factory()
        while new_id in existing_ids:
            logger.warning("Generated id %s already exists, regenerating", new_id)
            new_id = self._id_factory()

        video = replace(draft, id=new_id, created_at=self._clock())
        videos.append(video)
        self._save_all(videos)
        logger.info("Created video %s (%s)", video.id, video.title)
        return video

    def update(self, video: Video) -> Video:
        """
        Replace an existing entry.

        The stored created_at is kept; any value on `video` is discarded.

        Returns:
            The stored Video

        Raises:
            NotFoundError: If no entry has this id.
            ValidationError: If the log date or rating is malformed.
        """
        video.validate()
        videos = self._load_all()

        for i, existing in enumerate(videos):
            if existing.id == video.id:
                updated = replace(video, created_at=existing.created_at)
                videos[i] = updated
                break
        else:
            raise NotFoundError(video.id)

        self._save_all(videos)
        logger.info("Updated video %s", updated.id)
        return updated

    def delete(self, id: str) -> None:
        """
        Remove an entry entirely.

        Raises:
            NotFoundError: If no entry has this id (the file is untouched).
        """
        videos = self._load_all()
        remaining = [v for v in videos if v.id != id]
        if len(remaining) == len(videos):
            raise NotFoundError(id)

        self._save_all(remaining)
        logger.info("Deleted video %s", id)

    def get(self, id: str) -> Optional[Video]:
        """Like find_by_id, but returns None for a missing id."""
        try:
            return self.find_by_id(id)
        except NotFoundError:
            return None
