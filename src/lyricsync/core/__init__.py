"""Core functionality modules."""

from .models import (
    KaraokeSegments,
    KaraokeTimings,
    KaraokeWord,
    LyricLine,
    LyricSet,
    LyricsSource,
    ResolvedLyrics,
    Track,
)
from .formats import detect_format, parse_lyrics, parse_lyrics_async, stringify
from .bilingual import merge_lyrics
from .resolver import LyricsResolver, ResolutionState
from .session import LyricsSession
from .sync import SyncTracker, find_active_index

__all__ = [
    "KaraokeSegments",
    "KaraokeTimings",
    "KaraokeWord",
    "LyricLine",
    "LyricSet",
    "LyricsSource",
    "ResolvedLyrics",
    "Track",
    "detect_format",
    "parse_lyrics",
    "parse_lyrics_async",
    "stringify",
    "merge_lyrics",
    "LyricsResolver",
    "ResolutionState",
    "LyricsSession",
    "SyncTracker",
    "find_active_index",
]
