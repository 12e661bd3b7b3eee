"""Per-player lyrics session: the current track, its lyrics and the active line."""

from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Union

from ..config import LyricsConfig
from ..utils.logging import get_logger
from .models import EMPTY_LYRICS, LyricSet, LyricsSource, ResolvedLyrics, Track
from .resolver import LyricsResolver
from .sync import SyncTracker

logger = get_logger(__name__)

LyricsCallback = Callable[[ResolvedLyrics], None]


class LyricsSession:
    """Glue between a player and the resolver.

    Each track change starts a new generation. A resolution result is
    applied only if no newer track change or refetch happened while it
    was outstanding, so a slow result for an old track never replaces
    the lyrics of the current one.
    """

    def __init__(
        self,
        resolver: LyricsResolver,
        config: Optional[LyricsConfig] = None,
        tracker: Optional[SyncTracker] = None,
    ):
        self.resolver = resolver
        self.config = config or resolver.config
        self.tracker = tracker or SyncTracker(offset=self.config.user_offset)
        self.current_track: Optional[Track] = None
        self._generation = 0
        self._result: Optional[ResolvedLyrics] = None
        self._loading = False
        self._subscribers: List[LyricsCallback] = []

    # ----------------------
    # State
    # ----------------------
    @property
    def lyrics(self) -> LyricSet:
        return self._result.lines if self._result else EMPTY_LYRICS

    @property
    def source(self) -> LyricsSource:
        return self._result.source if self._result else LyricsSource.LOCAL

    @property
    def error(self) -> Optional[str]:
        return self._result.error if self._result else None

    @property
    def active_index(self) -> int:
        return self.tracker.active_index

    @property
    def loading(self) -> bool:
        return self._loading

    def subscribe_lyrics(self, callback: LyricsCallback) -> Callable[[], None]:
        """Call ``callback(result)`` whenever a result is applied."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # ----------------------
    # Player events
    # ----------------------
    async def on_track_changed(
        self, track: Optional[Union[Track, str, Path]]
    ) -> Optional[ResolvedLyrics]:
        """Resolve lyrics for the new current track.

        Returns the applied result, or None if the result went stale or
        the track was cleared.
        """
        self._generation += 1
        generation = self._generation
        self.tracker.set_lines(EMPTY_LYRICS)

        if track is None:
            self.current_track = None
            self._result = None
            self._loading = False
            return None

        self.current_track = Track.coerce(track)
        self._result = None
        return await self._apply(generation, self.resolver.resolve(self.current_track))

    async def refetch_online(self) -> Optional[ResolvedLyrics]:
        """Fetch lyrics for the current track from the providers again."""
        if self.current_track is None:
            return None
        self._generation += 1
        generation = self._generation
        return await self._apply(generation, self.resolver.refetch_online(self.current_track))

    def on_playback_time(self, current_time: float) -> Optional[int]:
        return self.tracker.update(current_time)

    def on_playback_stopped(self, current_time: float) -> Optional[int]:
        return self.tracker.flush(current_time)

    # ----------------------
    # Internals
    # ----------------------
    def _is_current(self, generation: int, track_path: str) -> bool:
        return (
            generation == self._generation
            and self.current_track is not None
            and self.current_track.path == track_path
        )

    async def _apply(
        self, generation: int, pending: Awaitable[ResolvedLyrics]
    ) -> Optional[ResolvedLyrics]:
        self._loading = True
        try:
            result = await pending
        finally:
            if generation == self._generation:
                self._loading = False

        if not self._is_current(generation, result.track_path):
            logger.debug(f"Discarding stale lyrics for {result.track_path}")
            return None

        self._result = result
        self.tracker.set_lines(result.lines)
        logger.debug(
            f"Applied {len(result.lines)} lines for {result.track_path} ({result.source.value})"
        )
        for callback in list(self._subscribers):
            try:
                callback(result)
            except Exception as e:
                logger.error(f"Lyrics callback failed: {e}")
        return result
