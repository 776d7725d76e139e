"""
Data types for the video log.
"""

from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Optional

from .errors import ValidationError


# Canonical log date format, e.g. "2025-01-04 3:07 PM"
DATETIME_FORMAT = "%Y-%m-%d %I:%M %p"
ISO_DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%m/%y"

UNKNOWN_CHANNEL = "Unknown Channel"

MIN_RATING = 0.0
MAX_RATING = 5.0


def utc_now_dt() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def parse_utc_timestamp(ts: str) -> datetime:
    """Parse a stored timestamp string to a timezone-aware UTC datetime.

    Accepts offsets, a trailing 'Z', and naive timestamps (assumed UTC).
    """
    ts = ts.replace("Z", "+00:00")
    dt = datetime.fromisoformat(ts)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(dt: datetime) -> str:
    """Serialize a created_at timestamp (ISO 8601 with UTC offset)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def parse_log_date(value: str) -> Optional[datetime]:
    """Parse a log date in the canonical format.

    Returns None when the value is empty or unparsable. The result is a
    naive datetime in the user's local wall-clock time.
    """
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), DATETIME_FORMAT)
    except ValueError:
        return None


def format_log_date(dt: datetime) -> str:
    """Format a datetime as a canonical log date ("2025-01-04 3:07 PM")."""
    hour = dt.hour % 12 or 12
    meridiem = "AM" if dt.hour < 12 else "PM"
    return f"{dt.strftime(ISO_DATE_FORMAT)} {hour}:{dt.minute:02d} {meridiem}"


def is_valid_rating(rating: float) -> bool:
    """True for 0 (unrated) and half steps up to 5."""
    if isinstance(rating, bool) or not isinstance(rating, (int, float)):
        return False
    if rating < MIN_RATING or rating > MAX_RATING:
        return False
    return float(rating * 2).is_integer()


def channel_label(channel: str) -> str:
    """Display name for a channel, with a placeholder for blanks."""
    return channel if channel else UNKNOWN_CHANNEL


@dataclass
class Video:
    """
    A single watch-log entry.

    `id` and `created_at` are assigned by the repository on create and
    never change afterwards. `rating` of 0 means unrated.
    """
    id: str = ""
    url: str = ""
    title: str = ""
    channel: str = ""
    release_date: str = ""
    log_date: str = ""
    rating: float = 0.0
    rewatched: bool = False
    review: str = ""
    created_at: datetime = field(default_factory=utc_now_dt)

    @property
    def logged_at(self) -> Optional[datetime]:
        """Parsed log date, or None if unparsable."""
        return parse_log_date(self.log_date)

    @property
    def is_rated(self) -> bool:
        return self.rating > 0

    def validate(self) -> None:
        """Check field invariants.

        Raises:
            ValidationError: If the log date is unparsable or the rating is
                outside the half-step domain.
        """
        if parse_log_date(self.log_date) is None:
            raise ValidationError(
                "log_date", f"Unparsable log date {self.log_date!r} (expected e.g. '2025-01-04 3:07 PM')"
            )
        if not is_valid_rating(self.rating):
            raise ValidationError(
                "rating", f"Rating must be 0 or a half step between 0.5 and 5: {self.rating!r}"
            )

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready dict in stable field order."""
        return {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "channel": self.channel,
            "release_date": self.release_date,
            "log_date": self.log_date,
            "rating": float(self.rating),
            "rewatched": self.rewatched,
            "review": self.review,
            "created_at": format_timestamp(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Video":
        """Build a Video from a persisted record.

        Missing keys take their zero value. Raises TypeError or ValueError
        for values of the wrong type.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Video record must be an object, got {type(data).__name__}")
        kwargs: dict[str, Any] = {}
        for name in ("id", "url", "title", "channel", "release_date", "log_date", "review"):
            value = data.get(name, "")
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise TypeError(f"Field {name!r} must be a string")
            kwargs[name] = value

        rating = data.get("rating", 0.0)
        if isinstance(rating, bool) or not isinstance(rating, (int, float)):
            raise TypeError("Field 'rating' must be a number")
        if not is_valid_rating(rating):
            raise ValueError(f"Field 'rating' must be 0 or a half step up to 5, got {rating!r}")
        kwargs["rating"] = float(rating)

        rewatched = data.get("rewatched", False)
        if not isinstance(rewatched, bool):
            raise TypeError("Field 'rewatched' must be a boolean")
        kwargs["rewatched"] = rewatched

        created = data.get("created_at")
        if created is None:
            kwargs["created_at"] = datetime.min.replace(tzinfo=timezone.utc)
        elif isinstance(created, str):
            kwargs["created_at"] = parse_utc_timestamp(created)
        else:
            raise TypeError("Field 'created_at' must be a timestamp string")
        return cls(**kwargs)


def new_video(
    url: str,
    title: str,
    channel: str,
    release_date: str,
    log_date: str,
    review: str = "",
    rewatched: bool = False,
    rating: float = 0.0,
) -> Video:
    """
    Construct a validated draft entry.

    The id is left empty; VideoRepository.create assigns it along with
    created_at.

    Raises:
        ValidationError: On an unparsable log date or invalid rating.
    """
    video = Video(
        url=url,
        title=title,
        channel=channel,
        release_date=release_date,
        log_date=log_date,
        review=review,
        rewatched=rewatched,
        rating=rating,
    )
    video.validate()
    video.rating = float(rating)
    return video


@dataclass
class Settings:
    """Application settings. There is exactly one persisted instance."""
    vim_motions: bool = True
    theme: str = "red"
    api_key: str = ""
    backup_repo: str = ""
    auto_sync: bool = True

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        """Build Settings from a persisted object.

        Missing keys fall back to the defaults. Raises TypeError for a
        non-object or for values of the wrong type.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Settings must be an object, got {type(data).__name__}")
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            expected = bool if f.type in (bool, "bool") else str
            if not isinstance(value, expected):
                raise TypeError(f"Setting {f.name!r} must be {expected.__name__}")
            kwargs[f.name] = value
        return cls(**kwargs)


BOOL_SETTINGS = frozenset(f.name for f in fields(Settings) if f.type in (bool, "bool"))


def default_settings() -> Settings:
    """The built-in settings used on first run and on a corrupt file."""
    return Settings()
