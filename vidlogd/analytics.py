"""
Statistics over a snapshot of the video collection.

All functions are pure: they take the entries to analyze (the full
collection or a filtered subset) and, where the calendar matters, an
explicit `now`. Everything is recomputed from scratch on each call,
which is fine for a personal log of a few hundred entries.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from .types import MONTH_FORMAT, Video, channel_label

MONTH_WINDOW = 9

# Fixed histogram keys: 1.0, 1.5, ..., 5.0
RATING_BUCKETS = tuple(1.0 + 0.5 * i for i in range(9))


@dataclass
class RatingDistribution:
    """Histogram of ratings. Unrated entries (rating 0) are counted apart."""
    buckets: dict[float, int] = field(default_factory=lambda: {r: 0 for r in RATING_BUCKETS})
    unrated: int = 0

    @property
    def rated(self) -> int:
        return sum(self.buckets.values())

    @property
    def max_count(self) -> int:
        return max(self.buckets.values(), default=0)


@dataclass
class ChannelStats:
    channel: str
    count: int = 0
    avg_rating: float = 0.0
    total_rated: int = 0


@dataclass
class MonthCount:
    month: str  # MM/YY
    count: int


@dataclass
class StreakInfo:
    count: int = 0  # entries in the streak
    days: int = 0  # calendar days spanned


@dataclass
class Summary:
    total: int = 0
    total_rated: int = 0
    avg_rating: float = 0.0
    rewatch_count: int = 0
    rewatch_pct: float = 0.0
    channel_count: int = 0


@dataclass
class Stats:
    """Every metric for one snapshot, as shown on the stats screen."""
    summary: Summary
    ratings: RatingDistribution
    channels: list[ChannelStats]
    months: list[MonthCount]
    current_streak: StreakInfo
    longest_streak: StreakInfo


# -----------------------------------------------------------------------------
# Distributions and aggregates
# -----------------------------------------------------------------------------

def rating_distribution(videos: Iterable[Video]) -> RatingDistribution:
    """
    Count entries per half-star rating.

    Ratings of 0 are tallied as unrated. A positive rating outside the
    fixed 1.0-5.0 keys (i.e. 0.5) gets its own bucket.
    """
    dist = RatingDistribution()
    for video in videos:
        if video.rating > 0:
            dist.buckets[video.rating] = dist.buckets.get(video.rating, 0) + 1
        else:
            dist.unrated += 1
    return dist


def channel_aggregates(videos: Iterable[Video]) -> list[ChannelStats]:
    """
    Per-channel entry count and mean rating.

    The mean is maintained incrementally in iteration order over rated
    entries only: new = (old * n + rating) / (n + 1). Sorted by count
    descending, then channel name.
    """
    by_channel: dict[str, ChannelStats] = {}
    for video in videos:
        name = channel_label(video.channel)
        stats = by_channel.get(name)
        if stats is None:
            stats = by_channel[name] = ChannelStats(channel=name)
        stats.count += 1
        if video.rating > 0:
            stats.avg_rating = (
                (stats.avg_rating * stats.total_rated + video.rating)
                / (stats.total_rated + 1)
            )
            stats.total_rated += 1
    return sorted(by_channel.values(), key=lambda s: (-s.count, s.channel))


def channel_list(videos: Iterable[Video]) -> list[str]:
    """Distinct channel labels, most logged first, ties by name."""
    return [s.channel for s in channel_aggregates(videos)]


def summary(videos: Sequence[Video]) -> Summary:
    """Totals for whatever subset is passed in."""
    result = Summary(total=len(videos))
    if not videos:
        return result

    rating_sum = 0.0
    channels = set()
    for video in videos:
        if video.rating > 0:
            rating_sum += video.rating
            result.total_rated += 1
        if video.rewatched:
            result.rewatch_count += 1
        channels.add(channel_label(video.channel))

    if result.total_rated:
        result.avg_rating = rating_sum / result.total_rated
    result.rewatch_pct = result.rewatch_count / result.total * 100
    result.channel_count = len(channels)
    return result


# -----------------------------------------------------------------------------
# Calendar
# -----------------------------------------------------------------------------

def month_keys(now: datetime, months: int = MONTH_WINDOW) -> list[tuple[int, int]]:
    """(year, month) pairs for the window ending at now's month, oldest first.

    Steps back one calendar month at a time, so month lengths never matter.
    """
    year, month = now.year, now.month
    keys = []
    for _ in range(months):
        keys.append((year, month))
        month -= 1
        if month == 0:
            year, month = year - 1, 12
    keys.reverse()
    return keys


def monthly_series(videos: Iterable[Video], now: Optional[datetime] = None) -> list[MonthCount]:
    """
    Entries logged per month over the 9 months ending at `now`.

    Always returns 9 points, oldest first, with 0 for empty months.
    Entries with an unparsable log date are ignored.
    """
    now = now or datetime.now()
    counts: dict[tuple[int, int], int] = {}
    for video in videos:
        logged = video.logged_at
        if logged is None:
            continue
        key = (logged.year, logged.month)
        counts[key] = counts.get(key, 0) + 1

    return [
        MonthCount(month=date(year, month, 1).strftime(MONTH_FORMAT), count=counts.get((year, month), 0))
        for year, month in month_keys(now)
    ]


def day_groups(videos: Iterable[Video]) -> list[tuple[date, int]]:
    """(day, entry count) per calendar day with entries, newest day first."""
    counts: dict[date, int] = {}
    for video in videos:
        logged = video.logged_at
        if logged is None:
            continue
        day = logged.date()
        counts[day] = counts.get(day, 0) + 1
    return sorted(counts.items(), reverse=True)


def streaks(videos: Iterable[Video], now: Optional[datetime] = None) -> tuple[StreakInfo, StreakInfo]:
    """
    Current and longest watch streaks.

    A streak is a run of days with entries where each day follows the
    previous one with no gap. The current streak counts only if the most
    recent day with entries is today or yesterday. The longest streak is
    the run with the most entries; on a tie the more recent run wins.

    Returns:
        (current, longest)
    """
    now = now or datetime.now()
    groups = day_groups(videos)
    if not groups:
        return StreakInfo(), StreakInfo()

    current = StreakInfo()
    newest_day, newest_count = groups[0]
    if (now.date() - newest_day).days <= 1:
        current = StreakInfo(count=newest_count, days=1)
        for (prev_day, _), (day, count) in zip(groups, groups[1:]):
            if (prev_day - day).days != 1:
                break
            current.count += count
            current.days += 1

    longest = StreakInfo()
    run = StreakInfo(count=newest_count, days=1)
    for (prev_day, _), (day, count) in zip(groups, groups[1:]):
        if (prev_day - day).days == 1:
            run.count += count
            run.days += 1
        else:
            if run.count > longest.count:
                longest = run
            run = StreakInfo(count=count, days=1)
    if run.count > longest.count:
        longest = run

    return current, longest


def compute_stats(videos: Sequence[Video], now: Optional[datetime] = None) -> Stats:
    """All metrics for one snapshot."""
    now = now or datetime.now()
    current, longest = streaks(videos, now)
    return Stats(
        summary=summary(videos),
        ratings=rating_distribution(videos),
        channels=channel_aggregates(videos),
        months=monthly_series(videos, now),
        current_streak=current,
        longest_streak=longest,
    )


# -----------------------------------------------------------------------------
# Filtering
# -----------------------------------------------------------------------------

def fuzzy_match(query: str, text: str) -> bool:
    """True if the characters of `query` appear in `text` in order (case-insensitive)."""
    remaining = iter(text.lower())
    return all(ch in remaining for ch in query.lower())


def filter_videos(
    videos: Sequence[Video],
    title_query: str = "",
    channel: str = "",
) -> list[Video]:
    """
    Narrow a snapshot the way the stats screen does.

    Args:
        title_query: Fuzzy subsequence match against the title
        channel: Exact channel label ("Unknown Channel" for blanks)
    """
    title_query = title_query.strip()
    if not title_query and not channel:
        return list(videos)
    return [
        v for v in videos
        if (not title_query or fuzzy_match(title_query, v.title))
        and (not channel or channel_label(v.channel) == channel)
    ]
