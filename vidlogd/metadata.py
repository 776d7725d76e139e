"""
HTTP client for YouTube video metadata.

Looks up title, channel and release date for a video URL through the
YouTube Data API so the entry form can be prefilled. Storage and
analytics never call this; the form layer (or `vidlogd add --fetch`)
does, then passes the result to VideoRepository.create/update.

The API key comes from, in order: the explicit argument, the settings
store's api_key, the YOUTUBE_API_KEY environment variable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from urllib.parse import parse_qs, urlparse

import httpx

from .config import youtube_api_key_from_env
from .types import ISO_DATE_FORMAT

logger = logging.getLogger(__name__)

API_BASE_URL = "https://www.googleapis.com/youtube/v3"
DEFAULT_TIMEOUT = 10.0

YOUTUBE_HOSTS = frozenset({"www.youtube.com", "youtube.com", "m.youtube.com", "youtu.be"})

MISSING_KEY_ERROR = "add YOUTUBE_API_KEY to your environment or set api_key in settings"


@dataclass
class VideoMetadata:
    title: str = ""
    creator: str = ""
    release_date: str = ""  # YYYY-MM-DD, empty if unknown


@dataclass
class MetadataResult:
    """Either metadata or a human-readable error, never both."""
    metadata: Optional[VideoMetadata] = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.metadata is not None and not self.error


def is_valid_youtube_url(url: str) -> bool:
    """Check for youtu.be/<id>, /watch?v=<id> and /embed/<id> URLs."""
    if not url:
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False

    host = (parsed.netloc or "").lower()
    if host not in YOUTUBE_HOSTS:
        return False
    if host == "youtu.be":
        return len(parsed.path) > 1
    if parsed.path.startswith("/watch"):
        return bool(parse_qs(parsed.query).get("v", [""])[0])
    if parsed.path.startswith("/embed/"):
        return len(parsed.path) > len("/embed/")
    return False


def extract_video_id(url: str) -> str:
    """Video id from a YouTube URL, or empty string."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return ""

    host = (parsed.netloc or "").lower()
    if host == "youtu.be":
        return parsed.path.lstrip("/")
    if parsed.path.startswith("/watch"):
        return parse_qs(parsed.query).get("v", [""])[0]
    if parsed.path.startswith("/embed/"):
        return parsed.path[len("/embed/"):]
    return ""


def _text(snippet: dict, key: str) -> str:
    value = snippet.get(key)
    return value if isinstance(value, str) else ""


def _format_published(published_at: str) -> str:
    if not published_at:
        return ""
    try:
        return datetime.fromisoformat(published_at.replace("Z", "+00:00")).strftime(ISO_DATE_FORMAT)
    except ValueError:
        return ""


class MetadataClient:
    """YouTube Data API client. Use as a context manager or call close()."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        settings_store=None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Args:
            api_key: Explicit key; overrides settings and environment
            settings_store: SettingsStore consulted for api_key on each fetch
            timeout: Request timeout in seconds
        """
        self._api_key = api_key
        self._settings_store = settings_store
        self._client = httpx.Client(base_url=API_BASE_URL, timeout=timeout)

    def _resolve_api_key(self) -> str:
        if self._api_key:
            return self._api_key
        if self._settings_store is not None:
            key = self._settings_store.load().api_key
            if key:
                return key
        return youtube_api_key_from_env()

    def fetch(self, url: str) -> MetadataResult:
        """GET /videos?part=snippet -> title, channel, release date."""
        api_key = self._resolve_api_key()
        if not api_key:
            return MetadataResult(error=MISSING_KEY_ERROR)
        if not is_valid_youtube_url(url):
            return MetadataResult(error="invalid YouTube URL")

        video_id = extract_video_id(url)
        if not video_id:
            return MetadataResult(error="could not extract video ID")

        try:
            resp = self._client.get(
                "/videos",
                params={"part": "snippet", "id": video_id, "key": api_key},
            )
        except httpx.HTTPError as e:
            logger.warning("Metadata request for %s failed: %s", video_id, e)
            return MetadataResult(error=f"failed to fetch video data: {e}")

        if resp.status_code == 403:
            return MetadataResult(error="quota exceeded or invalid key")
        if resp.status_code != 200:
            return MetadataResult(error=f"youtube error: {resp.status_code}")

        try:
            body = resp.json()
        except ValueError:
            return MetadataResult(error="failed to parse response")
        if not isinstance(body, dict):
            return MetadataResult(error="failed to parse response")

        items = body.get("items", [])
        if not isinstance(items, list):
            return MetadataResult(error="failed to parse response")
        if not items:
            return MetadataResult(error="video not found")

        snippet = items[0].get("snippet", {}) if isinstance(items[0], dict) else None
        if not isinstance(snippet, dict):
            return MetadataResult(error="failed to parse response")
        metadata = VideoMetadata(
            title=_text(snippet, "title"),
            creator=_text(snippet, "channelTitle"),
            release_date=_format_published(_text(snippet, "publishedAt")),
        )
        logger.debug("Fetched metadata for %s: %s", video_id, metadata.title)
        return MetadataResult(metadata=metadata)

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "MetadataClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
