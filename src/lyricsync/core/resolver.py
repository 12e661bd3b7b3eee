"""Lyric resolution pipeline.

For a track path, stages are tried in order:

1. Cache hit: an earlier online result still held in memory
2. Local lookup: a lyric file next to the audio file
3. Online fetch: the configured providers, optionally merged with a translation
4. Writeback: the fetched text saved next to the audio file
5. Not found: an empty lyric set

Resolutions are deduplicated per track path: a second request for a
path that is still being resolved awaits the first one.
"""

import asyncio
from collections import OrderedDict
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import Awaitable, Callable, Dict, Optional, Tuple, Union

from ..config import LyricsConfig
from ..exceptions import FetchError, WritebackError
from ..utils.cache import LyricsCache
from ..utils.logging import get_logger
from .bilingual import merge_lyrics
from .files import FileLookup, LocalFileLookup, sibling_lyrics_path
from .formats import AUTO, LRC, format_from_path, parse_lyrics_async
from .karaoke import KaraokeScale
from .models import LyricsSource, ResolvedLyrics, Track
from .providers import LyricProvider, build_provider

logger = get_logger(__name__)

TrackLike = Union[Track, str, Path]


class ResolutionState(str, Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


_RESOLVE = "resolve"
_REFETCH = "refetch"


class LyricsResolver:
    """Resolves the lyric set for a track through cache, disk and network."""

    def __init__(
        self,
        config: Optional[LyricsConfig] = None,
        files: Optional[FileLookup] = None,
        provider: Optional[LyricProvider] = None,
        cache: Optional[LyricsCache] = None,
    ):
        self.config = (config or LyricsConfig()).validate()
        self.files = files or LocalFileLookup()
        self.provider = provider if provider is not None else build_provider(self.config)
        self.cache: LyricsCache = (
            cache if cache is not None else LyricsCache(self.config.cache_capacity)
        )
        self._tasks: Dict[Tuple[str, str], "asyncio.Task[ResolvedLyrics]"] = {}
        self._resolved: "OrderedDict[str, ResolvedLyrics]" = OrderedDict()

    @property
    def karaoke_scale(self) -> KaraokeScale:
        return KaraokeScale(k=self.config.karaoke_k_scale, kf=self.config.karaoke_kf_scale)

    # ----------------------
    # Public API
    # ----------------------
    async def resolve(self, track: TrackLike) -> ResolvedLyrics:
        """Resolve lyrics for a track. Never raises for lookup or fetch failures."""
        track = Track.coerce(track)
        return await self._run_once((_RESOLVE, track.path), lambda: self._resolve(track))

    async def refetch_online(self, track: TrackLike) -> ResolvedLyrics:
        """Fetch from the providers again, ignoring the cache and local files."""
        track = Track.coerce(track)
        return await self._run_once((_REFETCH, track.path), lambda: self._refetch(track))

    def state_of(self, path: str) -> ResolutionState:
        if (_RESOLVE, path) in self._tasks or (_REFETCH, path) in self._tasks:
            return ResolutionState.IN_PROGRESS
        if path in self._resolved:
            return ResolutionState.RESOLVED
        return ResolutionState.IDLE

    def last_result(self, path: str) -> Optional[ResolvedLyrics]:
        """The most recent finished resolution for a path, if still remembered."""
        return self._resolved.get(path)

    def invalidate(self, path: str) -> None:
        """Forget cached and remembered results for a path."""
        self.cache.delete(path)
        self._resolved.pop(path, None)

    # ----------------------
    # Deduplication
    # ----------------------
    async def _run_once(
        self,
        key: Tuple[str, str],
        factory: Callable[[], Awaitable[ResolvedLyrics]],
    ) -> ResolvedLyrics:
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._tasks[key] = task
            task.add_done_callback(lambda t: self._forget_task(key, t))
        else:
            logger.debug(f"Joining in-progress resolution for {key[1]}")
        # A caller that stops waiting must not cancel the shared task
        return await asyncio.shield(task)

    def _forget_task(self, key: Tuple[str, str], task: "asyncio.Task[ResolvedLyrics]") -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]

    def _remember(self, result: ResolvedLyrics) -> ResolvedLyrics:
        self._resolved[result.track_path] = result
        self._resolved.move_to_end(result.track_path)
        while len(self._resolved) > self.cache.capacity:
            self._resolved.popitem(last=False)
        return result

    # ----------------------
    # Stages
    # ----------------------
    async def _resolve(self, track: Track) -> ResolvedLyrics:
        path = track.path

        cached = self.cache.get(path)
        if cached is not None:
            logger.debug(f"Using cached online lyrics for: {path}")
            return self._remember(cached)

        local, read_error = await self._load_local(track)
        if local is not None:
            return self._remember(local)

        if not self.config.enable_online_fetch:
            logger.debug(f"No lyrics for {path} (online fetch disabled)")
            return self._remember(ResolvedLyrics.not_found(path, read_error))

        result = await self._fetch_online(track)
        if not result.found and result.error is None and read_error:
            result = replace(result, error=read_error)
        return self._remember(result)

    async def _refetch(self, track: Track) -> ResolvedLyrics:
        self.cache.delete(track.path)
        return self._remember(await self._fetch_online(track))

    async def _load_local(self, track: Track) -> Tuple[Optional[ResolvedLyrics], Optional[str]]:
        try:
            lyrics_path = await self.files.find_lyric_file(track.path)
        except OSError as e:
            logger.warning(f"Lyric file lookup failed for {track.path}: {e}")
            return None, str(e)
        if not lyrics_path:
            return None, None

        try:
            text = await self.files.read_file(lyrics_path)
        except (OSError, UnicodeError) as e:
            logger.warning(f"Could not read {lyrics_path}: {e}")
            return None, f"Could not read {lyrics_path}: {e}"

        fmt = format_from_path(lyrics_path) or AUTO
        lines = await parse_lyrics_async(text, fmt, scale=self.karaoke_scale)
        logger.debug(f"Loaded {len(lines)} lines from {lyrics_path}")
        return (
            ResolvedLyrics(
                lines=lines,
                source=LyricsSource.LOCAL,
                raw_text=text,
                track_path=track.path,
                lyrics_path=lyrics_path,
            ),
            None,
        )

    async def _fetch_online(self, track: Track) -> ResolvedLyrics:
        path = track.path
        logger.debug(f"Fetching online lyrics for: {track.search_title} - {track.artist or ''}")
        try:
            found = await self.provider.search(track.search_title, track.artist, track.duration_ms)
        except FetchError as e:
            logger.warning(f"Failed to fetch online lyrics: {e}")
            return ResolvedLyrics.not_found(path, str(e))
        except Exception as e:
            logger.error(f"Unexpected error fetching lyrics for {path}: {e}")
            return ResolvedLyrics.not_found(path, str(e))

        if found is None or not found.found:
            logger.debug("No online lyrics found")
            return ResolvedLyrics.not_found(path)

        raw_text = found.primary_text
        if self.config.prefer_translation and found.translation_text:
            raw_text = merge_lyrics(found.primary_text, found.translation_text)

        lines = await parse_lyrics_async(raw_text, LRC, scale=self.karaoke_scale)
        if not lines:
            logger.debug(f"Online lyrics from {found.provider} have no timed lines")
            return ResolvedLyrics.not_found(path)

        result = ResolvedLyrics(
            lines=lines,
            source=LyricsSource.ONLINE,
            raw_text=raw_text,
            track_path=path,
        )
        self.cache.put(path, result)

        if self.config.auto_save_online_lyrics:
            result = await self._write_back(result)
        return result

    async def _write_back(self, result: ResolvedLyrics) -> ResolvedLyrics:
        target = sibling_lyrics_path(result.track_path, LRC)
        try:
            saved = await self.files.write_file(target, result.raw_text)
        except (OSError, WritebackError) as e:
            logger.warning(f"Failed to save lyrics to {target}: {e}")
            saved = False

        if not saved:
            # Still served from the cache on the next request
            return result

        logger.info(f"Lyrics saved to: {target}")
        self.cache.delete(result.track_path)
        return replace(result, source=LyricsSource.LOCAL, lyrics_path=target)
