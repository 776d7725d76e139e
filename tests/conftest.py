"""
Shared pytest fixtures for vidlogd tests.

Every test gets its own data directory under tmp_path; nothing touches
the real per-user data directory.
"""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from vidlogd.settings import SettingsStore
from vidlogd.types import Video
from vidlogd.videos import VideoRepository


class FakeClock:
    """Deterministic clock: each call advances by one second."""

    def __init__(self, start: datetime = datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start
        self.calls = 0

    def __call__(self) -> datetime:
        self.calls += 1
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


class SequentialIds:
    """Predictable ids: 0000000000000001, 0000000000000002, ..."""

    def __init__(self, values=None):
        self._values = list(values) if values is not None else None
        self.counter = 0

    def __call__(self) -> str:
        self.counter += 1
        if self._values is not None:
            return self._values.pop(0)
        return f"{self.counter:016x}"


def make_video(**overrides) -> Video:
    """A valid draft with sensible defaults."""
    fields = {
        "url": "https://www.youtube.com/watch?v=abc123",
        "title": "A video",
        "channel": "Channel",
        "release_date": "2024-12-01",
        "log_date": "2025-01-04 3:07 PM",
        "rating": 4.0,
        "rewatched": False,
        "review": "",
    }
    fields.update(overrides)
    return Video(**fields)


@pytest.fixture
def data_dir(tmp_path) -> Path:
    """Isolated data directory."""
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep tests away from the user's real data directory and API key."""
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("VIDLOGD_DATA_DIR", raising=False)
    monkeypatch.delenv("YOUTUBE_API_KEY", raising=False)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ids() -> SequentialIds:
    return SequentialIds()


@pytest.fixture
def repo(data_dir, clock, ids) -> VideoRepository:
    """Repository with a frozen clock and predictable ids."""
    return VideoRepository(data_dir / "videos.json", clock=clock, id_factory=ids)


@pytest.fixture
def settings_store(data_dir) -> SettingsStore:
    return SettingsStore(data_dir / "settings.json")


@pytest.fixture
def video_factory():
    """Factory for valid drafts: video_factory(title="x", rating=3.5)."""
    return make_video
