"""
CLI interface for the video log.

Usage:
    vidlogd list --channel "Some Channel"
    vidlogd add https://youtu.be/dQw4w9WgXcQ --fetch --rating 4.5
    vidlogd stats
"""

import json
import logging
from contextlib import contextmanager
from dataclasses import asdict, replace
from datetime import date, datetime
from pathlib import Path
from typing import Iterator, Optional

import typer
from typing_extensions import Annotated

from .analytics import Stats, compute_stats, filter_videos
from .config import ENV_DATA_DIR, StoreConfig, is_verbose, load_store_config
from .errors import VidlogError, log_exception
from .logging_config import close_ops_log, configure_ops_log, configure_quiet_mode, enable_debug_mode
from .metadata import MetadataClient
from .settings import SettingsStore
from .types import BOOL_SETTINGS, Video, format_log_date, new_video
from .videos import VideoRepository

# Set VIDLOGD_VERBOSE=1 to enable debug mode via environment
if is_verbose():
    enable_debug_mode()
else:
    configure_quiet_mode(quiet=True)


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        print(f"vidlogd {version('vidlogd')}")
        raise typer.Exit()


def _verbose_callback(value: bool):
    if value:
        enable_debug_mode()


# Global state for CLI options
_json_output = False
_data_dir_override: Optional[Path] = None
_ops_log_handler: Optional[logging.Handler] = None
_ops_log_dir: Optional[Path] = None


def _get_json_output() -> bool:
    return _json_output


app = typer.Typer(
    name="vidlogd",
    help="Personal video watch log.",
    no_args_is_help=True,
    rich_markup_mode=None,
)


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option(
        "--verbose", "-v",
        help="Enable debug-level logging to stderr",
        callback=_verbose_callback,
        is_eager=True,
    )] = False,
    output_json: Annotated[bool, typer.Option(
        "--json", "-j",
        help="Output as JSON",
    )] = False,
    data_dir: Annotated[Optional[Path], typer.Option(
        "--data-dir", "-d",
        envvar=ENV_DATA_DIR,
        help="Path to the data directory (default: platform data dir)",
    )] = None,
    version: Annotated[Optional[bool], typer.Option(
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    )] = None,
):
    """Personal video watch log."""
    global _json_output, _data_dir_override
    _json_output = output_json
    _data_dir_override = data_dir


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def _get_config() -> StoreConfig:
    global _ops_log_handler, _ops_log_dir
    config = load_store_config(_data_dir_override)
    if _ops_log_dir != config.path:
        close_ops_log(_ops_log_handler)
        _ops_log_handler = configure_ops_log(config.ops_log_path)
        _ops_log_dir = config.path
    return config


def _get_repository() -> VideoRepository:
    return VideoRepository(_get_config().videos_path)


def _get_settings_store() -> SettingsStore:
    return SettingsStore(_get_config().settings_path)


@contextmanager
def _user_errors() -> Iterator[None]:
    """Turn expected failures into a one-line message and exit code 1."""
    try:
        yield
    except VidlogError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _format_rating(rating: float) -> str:
    return f"{rating:.1f}" if rating > 0 else "  -"


def _format_video_line(video: Video) -> str:
    channel = f" ({video.channel})" if video.channel else ""
    flag = " [rewatch]" if video.rewatched else ""
    return f"{video.id}  {video.log_date:<19}  {_format_rating(video.rating)}  {video.title}{channel}{flag}"


def _video_json(video: Video) -> dict:
    return video.to_dict()


def _format_video_detail(video: Video) -> str:
    lines = [
        f"id: {video.id}",
        f"title: {video.title}",
        f"channel: {video.channel}",
        f"url: {video.url}",
        f"released: {video.release_date}",
        f"logged: {video.log_date}",
        f"rating: {_format_rating(video.rating).strip()}",
        f"rewatched: {'yes' if video.rewatched else 'no'}",
        f"created: {video.to_dict()['created_at']}",
    ]
    if video.review:
        lines.append("")
        lines.append(video.review)
    return "\n".join(lines)


def _format_stats(stats: Stats) -> str:
    s = stats.summary
    lines = [
        f"Videos:    {s.total}",
        f"Rated:     {s.total_rated} (avg {s.avg_rating:.2f})",
        f"Rewatched: {s.rewatch_count} ({s.rewatch_pct:.0f}%)",
        f"Channels:  {s.channel_count}",
        f"Streak:    {stats.current_streak.count} videos over {stats.current_streak.days} days"
        f" (best {stats.longest_streak.count} over {stats.longest_streak.days})",
        "",
        "Ratings:",
    ]
    for rating, count in sorted(stats.ratings.buckets.items()):
        lines.append(f"  {rating:.1f}  {'#' * count} {count}")
    lines.append(f"  unrated  {stats.ratings.unrated}")
    lines.append("")
    lines.append("Months:")
    for month in stats.months:
        lines.append(f"  {month.month}  {'#' * month.count} {month.count}")
    if stats.channels:
        lines.append("")
        lines.append("Top channels:")
        for ch in stats.channels[:10]:
            avg = f"{ch.avg_rating:.2f}" if ch.total_rated else "-"
            lines.append(f"  {ch.count:>4}  {avg:>4}  {ch.channel}")
    return "\n".join(lines)


def _stats_json(stats: Stats) -> dict:
    data = asdict(stats)
    data["ratings"]["buckets"] = {f"{k:.1f}": v for k, v in sorted(stats.ratings.buckets.items())}
    return data


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise typer.BadParameter(f"Expected a boolean (true/false), got {value!r}")


# -----------------------------------------------------------------------------
# Common Options
# -----------------------------------------------------------------------------

SearchOption = Annotated[
    str,
    typer.Option("--search", "-s", help="Fuzzy match against titles"),
]

ChannelOption = Annotated[
    str,
    typer.Option("--channel", "-c", help="Only this channel ('Unknown Channel' for blanks)"),
]


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

@app.command("list")
def list_videos(
    search: SearchOption = "",
    channel: ChannelOption = "",
    limit: Annotated[int, typer.Option(
        "--limit", "-n",
        help="Maximum entries to show (0 for all)",
    )] = 0,
):
    """List logged videos, most recent first."""
    with _user_errors():
        videos = filter_videos(_get_repository().list(), search, channel)
    if limit > 0:
        videos = videos[:limit]

    if _get_json_output():
        typer.echo(json.dumps([_video_json(v) for v in videos], indent=2, ensure_ascii=False))
        return
    if not videos:
        typer.echo("No videos logged.")
        return
    for video in videos:
        typer.echo(_format_video_line(video))


@app.command()
def show(
    id: Annotated[str, typer.Argument(help="Video ID")],
):
    """Show one logged video."""
    with _user_errors():
        video = _get_repository().find_by_id(id)
    if _get_json_output():
        typer.echo(json.dumps(_video_json(video), indent=2, ensure_ascii=False))
    else:
        typer.echo(_format_video_detail(video))


@app.command()
def add(
    url: Annotated[str, typer.Argument(help="Video URL")],
    title: Annotated[Optional[str], typer.Option("--title", "-t", help="Video title")] = None,
    channel: Annotated[Optional[str], typer.Option("--channel", "-c", help="Channel name")] = None,
    release_date: Annotated[Optional[str], typer.Option(
        "--release-date", help="Release date (YYYY-MM-DD)",
    )] = None,
    log_date: Annotated[Optional[str], typer.Option(
        "--log-date", "-l", help="When you watched it, e.g. '2025-01-04 3:07 PM' (default: now)",
    )] = None,
    rating: Annotated[float, typer.Option(
        "--rating", "-r", help="0 (unrated) or 0.5-5 in half steps",
    )] = 0.0,
    rewatched: Annotated[bool, typer.Option("--rewatched", help="Mark as a rewatch")] = False,
    review: Annotated[str, typer.Option("--review", help="Review text")] = "",
    fetch: Annotated[bool, typer.Option(
        "--fetch", "-f", help="Fill title/channel/release date from YouTube",
    )] = False,
):
    """Log a watched video."""
    if fetch:
        with MetadataClient(settings_store=_get_settings_store()) as client:
            result = client.fetch(url)
        if result.ok:
            title = title if title is not None else result.metadata.title
            channel = channel if channel is not None else result.metadata.creator
            release_date = release_date if release_date is not None else result.metadata.release_date
        else:
            typer.echo(f"Warning: metadata lookup failed: {result.error}", err=True)

    with _user_errors():
        draft = new_video(
            url=url,
            title=title or "",
            channel=channel or "",
            release_date=release_date or "",
            log_date=log_date or format_log_date(datetime.now()),
            review=review,
            rewatched=rewatched,
            rating=rating,
        )
        video = _get_repository().create(draft)

    if _get_json_output():
        typer.echo(json.dumps(_video_json(video), indent=2, ensure_ascii=False))
    else:
        typer.echo(_format_video_line(video))


@app.command()
def edit(
    id: Annotated[str, typer.Argument(help="Video ID")],
    url: Annotated[Optional[str], typer.Option("--url", help="Video URL")] = None,
    title: Annotated[Optional[str], typer.Option("--title", "-t", help="Video title")] = None,
    channel: Annotated[Optional[str], typer.Option("--channel", "-c", help="Channel name")] = None,
    release_date: Annotated[Optional[str], typer.Option("--release-date", help="Release date")] = None,
    log_date: Annotated[Optional[str], typer.Option("--log-date", "-l", help="Watch date")] = None,
    rating: Annotated[Optional[float], typer.Option("--rating", "-r", help="New rating")] = None,
    rewatched: Annotated[Optional[bool], typer.Option(
        "--rewatched/--first-watch", help="Rewatch flag",
    )] = None,
    review: Annotated[Optional[str], typer.Option("--review", help="Review text")] = None,
):
    """Change fields of a logged video. Unspecified fields are kept."""
    changes = {
        "url": url,
        "title": title,
        "channel": channel,
        "release_date": release_date,
        "log_date": log_date,
        "rating": float(rating) if rating is not None else None,
        "rewatched": rewatched,
        "review": review,
    }
    changes = {k: v for k, v in changes.items() if v is not None}

    with _user_errors():
        repo = _get_repository()
        video = repo.update(replace(repo.find_by_id(id), **changes))

    if _get_json_output():
        typer.echo(json.dumps(_video_json(video), indent=2, ensure_ascii=False))
    else:
        typer.echo(_format_video_line(video))


@app.command("del")
def del_cmd(
    id: Annotated[list[str], typer.Argument(help="ID(s) of video(s) to delete")],
):
    """
    Delete logged video(s).

    \b
    Examples:
        vidlogd del 3f9a0c1d2e4b5a67
        vidlogd del 3f9a0c1d2e4b5a67 0b1c2d3e4f5a6b7c
    """
    repo = _get_repository()
    had_errors = False

    for one_id in id:
        try:
            repo.delete(one_id)
        except VidlogError as e:
            typer.echo(f"Error: {e}", err=True)
            had_errors = True
            continue
        typer.echo(f"Deleted {one_id}")

    if had_errors:
        raise typer.Exit(1)


@app.command()
def stats(
    search: SearchOption = "",
    channel: ChannelOption = "",
    now: Annotated[Optional[str], typer.Option(
        "--now", help="Compute as of this date (YYYY-MM-DD) instead of today",
    )] = None,
):
    """Show statistics for all videos, or a filtered subset."""
    as_of = datetime.now()
    if now:
        try:
            as_of = datetime.combine(date.fromisoformat(now), datetime.min.time())
        except ValueError:
            raise typer.BadParameter(f"Expected YYYY-MM-DD, got {now!r}", param_hint="--now")

    with _user_errors():
        videos = filter_videos(_get_repository().list(), search, channel)
    result = compute_stats(videos, as_of)

    if _get_json_output():
        typer.echo(json.dumps(_stats_json(result), indent=2, ensure_ascii=False))
    else:
        typer.echo(_format_stats(result))


@app.command()
def config(
    key: Annotated[Optional[str], typer.Argument(help="Setting name")] = None,
    value: Annotated[Optional[str], typer.Argument(help="New value")] = None,
):
    """
    Show or change settings.

    \b
    Examples:
        vidlogd config                  # Show all settings
        vidlogd config theme            # Show one setting
        vidlogd config theme blue       # Change a setting
        vidlogd config auto_sync false
    """
    store = _get_settings_store()
    settings = store.load()
    data = settings.to_dict()

    if key is None:
        if _get_json_output():
            typer.echo(json.dumps(data, indent=2))
        else:
            for k, v in data.items():
                typer.echo(f"{k}: {json.dumps(v)}")
        return

    if key not in data:
        typer.echo(f"Error: unknown setting {key!r} (known: {', '.join(data)})", err=True)
        raise typer.Exit(1)

    if value is None:
        typer.echo(json.dumps(data[key]) if _get_json_output() else str(data[key]))
        return

    new_value = _parse_bool(value) if key in BOOL_SETTINGS else value
    store.save(replace(settings, **{key: new_value}))
    typer.echo(f"{key}: {json.dumps(new_value)}")


@app.command()
def fetch(
    url: Annotated[str, typer.Argument(help="YouTube video URL")],
):
    """Look up title, channel and release date for a YouTube URL."""
    with MetadataClient(settings_store=_get_settings_store()) as client:
        result = client.fetch(url)

    if not result.ok:
        typer.echo(f"Error: {result.error}", err=True)
        raise typer.Exit(1)

    if _get_json_output():
        typer.echo(json.dumps(asdict(result.metadata), indent=2, ensure_ascii=False))
    else:
        typer.echo(f"title: {result.metadata.title}")
        typer.echo(f"channel: {result.metadata.creator}")
        typer.echo(f"released: {result.metadata.release_date}")


# -----------------------------------------------------------------------------

def main():
    try:
        app()
    except SystemExit:
        raise  # Let typer handle exit codes
    except KeyboardInterrupt:
        raise SystemExit(130)  # Standard exit code for Ctrl+C
    except Exception as e:
        # Full traceback to the data dir's crash log, one line to the user
        log_path = log_exception(e, context="vidlogd CLI", data_dir=_data_dir_override)
        typer.echo(f"Error: {e}", err=True)
        typer.echo(f"Details logged to {log_path}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
