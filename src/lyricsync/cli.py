"""Command-line interface using Click."""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import click

from . import __version__
from .config import LyricsConfig
from .core.bilingual import merge_lyrics
from .core.formats import AUTO, format_from_path, parse_lyrics, stringify
from .core.lrc import format_lrc_timestamp
from .core.models import KaraokeSegments, KaraokeTimings, LyricLine, LyricSet, Track
from .core.resolver import LyricsResolver
from .core.sync import SyncTracker
from .exceptions import LyricSyncError, LyricsError, WritebackError
from .utils.logging import setup_logging
from .utils.validation import validate_format, validate_offset, validate_track_path


def _format_line(line: LyricLine, show_karaoke: bool = False) -> str:
    text = " / ".join(line.texts)
    row = f"[{format_lrc_timestamp(line.time)}] {text}"
    if not show_karaoke or line.karaoke is None:
        return row
    if isinstance(line.karaoke, KaraokeSegments):
        parts = [f"{w.text}({w.start_time:.2f}-{w.end_time:.2f})" for w in line.karaoke.words]
        return row + "\n    karaoke: " + " ".join(parts)
    if isinstance(line.karaoke, KaraokeTimings):
        stamps = [f"{t.time:.2f}" for t in line.karaoke.timings]
        return row + "\n    timings: " + " ".join(stamps)
    return row


def _echo_lines(lines: LyricSet, show_karaoke: bool = False) -> None:
    for line in lines:
        click.echo(_format_line(line, show_karaoke))


def _read_text(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8-sig", errors="replace")
    except OSError as e:
        raise LyricsError(f"Cannot read {path}: {e}") from e


def _write_text(path: str, text: str) -> None:
    try:
        Path(path).write_text(text, encoding="utf-8")
    except OSError as e:
        raise WritebackError(f"Cannot write {path}: {e}") from e


def _load_file(path: str, fmt: str = AUTO) -> LyricSet:
    fmt = validate_format(fmt)
    if fmt == AUTO:
        fmt = format_from_path(path) or AUTO
    return parse_lyrics(_read_text(path), fmt)


def _build_config(
    online: Optional[bool], save: bool, translation: Optional[bool], offset: Optional[float]
) -> LyricsConfig:
    config = LyricsConfig.from_env()
    changes = {}
    if online is not None:
        changes["enable_online_fetch"] = online
    if not save:
        changes["auto_save_online_lyrics"] = False
    if translation is not None:
        changes["prefer_translation"] = translation
    if offset is not None:
        changes["user_offset"] = validate_offset(offset)
    return config.with_changes(**changes) if changes else config


def _resolve(config: LyricsConfig, track: Track):
    resolver = LyricsResolver(config)
    return asyncio.run(resolver.resolve(track))


def _fail(ctx, message: str) -> None:
    logger = ctx.obj["logger"]
    logger.error(f"❌ {message}")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.option('--log-file', type=click.Path(), help='Log to file')
@click.option('--provider-log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Log level of the HTTP and provider libraries')
@click.pass_context
def cli(ctx, verbose, log_file, provider_log_level):
    """lyricsync - Resolve, parse and synchronize timed lyrics."""
    ctx.ensure_object(dict)
    logger = setup_logging(
        level="DEBUG" if verbose else "INFO",
        log_file=Path(log_file) if log_file else None,
        verbose=verbose,
        provider_level=provider_log_level,
    )
    ctx.obj['logger'] = logger
    ctx.obj['verbose'] = verbose


@cli.command()
@click.argument('track')
@click.option('--title', help='Track title used for online search')
@click.option('--artist', help='Track artist used for online search')
@click.option('--duration', type=float, help='Track duration in seconds')
@click.option('--online/--no-online', default=None,
              help='Fetch from online providers when no local file exists')
@click.option('--no-save', is_flag=True, help='Do not save fetched lyrics next to the track')
@click.option('--translation/--no-translation', default=None,
              help='Merge a translation when the provider has one')
@click.option('--karaoke', is_flag=True, help='Show karaoke timing')
@click.pass_context
def show(ctx, track, title, artist, duration, online, no_save, translation, karaoke):
    """Resolve and print the lyrics of TRACK."""
    try:
        track_path = validate_track_path(track)
        config = _build_config(online, not no_save, translation, None)
        result = _resolve(
            config,
            Track(path=str(track_path), title=title, artist=artist, duration=duration),
        )
    except LyricSyncError as e:
        _fail(ctx, str(e))
        return

    if not result.found:
        message = "No lyrics found"
        if result.error:
            message += f" ({result.error})"
        _fail(ctx, message)
        return

    where = f" ({result.lyrics_path})" if result.lyrics_path else ""
    click.echo(f"Source: {result.source.value}{where}")
    _echo_lines(result.lines, karaoke)


@cli.command()
@click.argument('lyrics_file')
@click.option('--format', 'fmt', default=AUTO, help='lrc, ass, srt or auto')
@click.pass_context
def parse(ctx, lyrics_file, fmt):
    """Parse LYRICS_FILE and print its lines."""
    try:
        lines = _load_file(lyrics_file, fmt)
    except LyricSyncError as e:
        _fail(ctx, str(e))
        return

    if not lines:
        _fail(ctx, f"No timed lines in {lyrics_file}")
        return
    _echo_lines(lines, show_karaoke=True)
    click.echo(f"{len(lines)} lines")


@cli.command()
@click.argument('lyrics_file')
@click.argument('output')
@click.option('--to', 'target', default=None, help='lrc, ass or srt (default: from OUTPUT)')
@click.pass_context
def convert(ctx, lyrics_file, output, target):
    """Convert LYRICS_FILE to another format."""
    try:
        target = validate_format(target or format_from_path(output) or "lrc", allow_auto=False)
        lines = _load_file(lyrics_file)
        if not lines:
            raise LyricsError(f"No timed lines in {lyrics_file}")
        _write_text(output, stringify(lines, target))
    except LyricSyncError as e:
        _fail(ctx, str(e))
        return
    click.echo(f"✅ Wrote {len(lines)} lines to {output}")


@cli.command()
@click.argument('primary')
@click.argument('translation')
@click.option('-o', '--output', help='Write the merged LRC here instead of stdout')
@click.pass_context
def merge(ctx, primary, translation, output):
    """Merge a PRIMARY LRC file with its TRANSLATION."""
    try:
        merged = merge_lyrics(_read_text(primary), _read_text(translation))
        if output:
            _write_text(output, merged + "\n")
    except LyricSyncError as e:
        _fail(ctx, str(e))
        return

    if output:
        click.echo(f"✅ Merged lyrics written to {output}")
    else:
        click.echo(merged)


@cli.command()
@click.argument('track')
@click.argument('seconds', type=float)
@click.option('--offset', type=float, default=None,
              help='Lyrics offset in seconds (positive = later)')
@click.option('--online/--no-online', default=None,
              help='Fetch from online providers when no local file exists')
@click.pass_context
def at(ctx, track, seconds, offset, online):
    """Print the line of TRACK that is active at SECONDS."""
    try:
        track_path = validate_track_path(track)
        config = _build_config(online, True, None, offset)
        result = _resolve(config, Track(path=str(track_path)))
    except LyricSyncError as e:
        _fail(ctx, str(e))
        return

    if not result.found:
        _fail(ctx, "No lyrics found")
        return

    tracker = SyncTracker(result.lines, offset=config.user_offset)
    tracker.flush(seconds)
    index = tracker.active_index
    if index < 0:
        click.echo("(before first line)")
        return
    click.echo(f"{index}: {_format_line(result.lines[index])}")


if __name__ == '__main__':
    cli()
