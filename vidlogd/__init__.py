"""
vidlogd - a personal video watch log.

Durable local storage for watched-video entries and the statistics
computed over them.

Quick Start:
    from vidlogd import VideoRepository, load_store_config, new_video

    cfg = load_store_config()
    repo = VideoRepository(cfg.videos_path)
    repo.create(new_video("https://youtu.be/x", "Title", "Channel", "", "2025-01-04 3:07 PM"))
"""

__version__ = "0.3.0"

from .analytics import (
    ChannelStats,
    MonthCount,
    RatingDistribution,
    Stats,
    StreakInfo,
    Summary,
    channel_aggregates,
    compute_stats,
    filter_videos,
    monthly_series,
    rating_distribution,
    streaks,
    summary,
)
from .atomic import write_file_atomic
from .config import StoreConfig, load_store_config
from .errors import NotFoundError, ParseError, ValidationError, VidlogError
from .settings import SettingsStore
from .types import Settings, Video, default_settings, new_video
from .videos import VideoRepository

__all__ = [
    "ChannelStats",
    "MonthCount",
    "NotFoundError",
    "ParseError",
    "RatingDistribution",
    "Settings",
    "SettingsStore",
    "Stats",
    "StoreConfig",
    "StreakInfo",
    "Summary",
    "ValidationError",
    "Video",
    "VideoRepository",
    "VidlogError",
    "channel_aggregates",
    "compute_stats",
    "default_settings",
    "filter_videos",
    "load_store_config",
    "monthly_series",
    "new_video",
    "rating_distribution",
    "streaks",
    "summary",
    "write_file_atomic",
]
