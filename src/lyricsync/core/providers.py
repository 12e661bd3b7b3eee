"""Online lyric providers.

Each provider answers ``search(title, artist, duration_ms)`` with a
ProviderResult, or None when it has no lyrics for the track. Provider
failures are raised as FetchError. Blocking clients run in a worker
thread.
"""

import asyncio
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from ..config import LyricsConfig
from ..exceptions import FetchError
from ..utils.logging import get_logger
from .lrc import has_timestamps
from .netease import NeteaseClient

logger = get_logger(__name__)

try:
    import syncedlyrics

    SYNCEDLYRICS_AVAILABLE = True
except ImportError:
    syncedlyrics = None
    SYNCEDLYRICS_AVAILABLE = False

try:
    from lyriq import get_lyrics as lyriq_get_lyrics

    LYRIQ_AVAILABLE = True
except ImportError:
    lyriq_get_lyrics = None
    LYRIQ_AVAILABLE = False


@dataclass(frozen=True)
class ProviderResult:
    """Raw LRC texts returned by a provider."""

    primary_text: str
    translation_text: Optional[str] = None
    provider: str = ""

    @property
    def found(self) -> bool:
        return bool(self.primary_text and self.primary_text.strip())


class LyricProvider(Protocol):
    """Remote lyric source."""

    name: str

    async def search(
        self, title: str, artist: Optional[str], duration_ms: int
    ) -> Optional[ProviderResult]: ...


class NeteaseProvider:
    """NetEase Cloud Music: synced lyrics plus a translation when available.

    Songs without a translation fall back to their romanization.
    """

    name = "netease"

    def __init__(self, client: Optional[NeteaseClient] = None):
        self.client = client or NeteaseClient()

    async def search(
        self, title: str, artist: Optional[str], duration_ms: int
    ) -> Optional[ProviderResult]:
        lyrics = await asyncio.to_thread(
            self.client.search_and_get_lyrics, title, artist or "", duration_ms
        )
        if lyrics is None or not lyrics.lrc.strip():
            return None
        return ProviderResult(
            primary_text=lyrics.lrc,
            translation_text=lyrics.tlyric or lyrics.romalrc or None,
            provider=self.name,
        )


class LyriqProvider:
    """LRCLib via lyriq; only synced lyrics are accepted."""

    name = "lrclib"

    def _fetch(self, title: str, artist: str) -> Optional[str]:
        if not LYRIQ_AVAILABLE:
            logger.debug("lyriq not installed")
            return None
        try:
            lyrics_obj = lyriq_get_lyrics(title, artist)
        except Exception as e:
            raise FetchError(f"lyriq lookup failed: {e}") from e
        if lyrics_obj is None:
            return None
        synced = getattr(lyrics_obj, "synced_lyrics", None)
        if synced and has_timestamps(synced):
            return synced
        return None

    async def search(
        self, title: str, artist: Optional[str], duration_ms: int
    ) -> Optional[ProviderResult]:
        lrc = await asyncio.to_thread(self._fetch, title, artist or "")
        if not lrc:
            return None
        return ProviderResult(primary_text=lrc, provider=self.name)


class SyncedLyricsProvider:
    """Search through the syncedlyrics aggregator."""

    name = "syncedlyrics"

    def __init__(self, providers: Optional[Sequence[str]] = None):
        self.providers = list(providers) if providers else None

    def _fetch(self, search_term: str) -> Optional[str]:
        if not SYNCEDLYRICS_AVAILABLE:
            logger.debug("syncedlyrics not installed")
            return None
        try:
            if self.providers:
                lrc = syncedlyrics.search(
                    search_term, providers=self.providers, synced_only=True
                )
            else:
                lrc = syncedlyrics.search(search_term, synced_only=True)
        except Exception as e:
            raise FetchError(f"syncedlyrics search failed: {e}") from e
        if lrc and has_timestamps(lrc):
            return lrc
        return None

    async def search(
        self, title: str, artist: Optional[str], duration_ms: int
    ) -> Optional[ProviderResult]:
        search_term = f"{artist} {title}" if artist else title
        lrc = await asyncio.to_thread(self._fetch, search_term)
        if not lrc:
            return None
        return ProviderResult(primary_text=lrc, provider=self.name)


class ProviderChain:
    """Try providers in order; the first one with lyrics wins."""

    name = "chain"

    def __init__(self, providers: Sequence[LyricProvider]):
        self.providers = list(providers)

    async def search(
        self, title: str, artist: Optional[str], duration_ms: int
    ) -> Optional[ProviderResult]:
        failures: List[str] = []
        for provider in self.providers:
            logger.debug(f"Trying {provider.name} for: {title} - {artist or ''}")
            try:
                result = await provider.search(title, artist, duration_ms)
            except FetchError as e:
                logger.warning(f"{provider.name} failed: {e}")
                failures.append(f"{provider.name}: {e}")
                continue
            if result is not None and result.found:
                logger.debug(f"Found lyrics from {provider.name}")
                return result

        if failures:
            raise FetchError("; ".join(failures))
        return None


_PROVIDER_FACTORIES = {
    "netease": NeteaseProvider,
    "lrclib": LyriqProvider,
    "syncedlyrics": SyncedLyricsProvider,
}


def build_provider(config: LyricsConfig) -> ProviderChain:
    """Assemble the provider chain named by ``config.online_sources``."""
    providers = [_PROVIDER_FACTORIES[name]() for name in config.online_sources]
    return ProviderChain(providers)
