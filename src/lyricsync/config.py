"""Configuration settings for lyricsync."""

import os
from dataclasses import dataclass, field, replace
from typing import Tuple

from .exceptions import ConfigError

# Lyric files looked up next to the audio file, in priority order
LYRIC_EXTENSIONS: Tuple[str, ...] = ("lrc", "ass", "srt")

# Online results kept in memory (tracks)
CACHE_CAPACITY = int(os.getenv("LYRICSYNC_CACHE_CAPACITY", "50"))

# Parsing yields to the event loop after this many lines
PARSE_CHUNK_SIZE = int(os.getenv("LYRICSYNC_PARSE_CHUNK_SIZE", "100"))

# Playback sync
SYNC_LEAD_BIAS = 0.05  # Seconds to show a line ahead of the audio (render lag)
SYNC_MIN_INTERVAL = float(os.getenv("LYRICSYNC_SYNC_INTERVAL", "0.1"))
OFFSET_LIMIT = 10.0  # Largest user offset accepted, in seconds
OFFSET_STEP = 0.1

# Karaoke tag scale (centiseconds -> seconds)
KARAOKE_K_SCALE = float(os.getenv("LYRICSYNC_KARAOKE_K_SCALE", "0.01"))
KARAOKE_KF_SCALE = float(os.getenv("LYRICSYNC_KARAOKE_KF_SCALE", "0.01"))

# Network
FETCH_TIMEOUT = int(os.getenv("LYRICSYNC_FETCH_TIMEOUT", "10"))
FETCH_MAX_RETRIES = 2

KNOWN_SOURCES = ("netease", "lrclib", "syncedlyrics")


def validate_config() -> None:
    """Validate configuration values."""
    if CACHE_CAPACITY < 1:
        raise ConfigError("Cache capacity must be at least 1")

    if PARSE_CHUNK_SIZE < 1:
        raise ConfigError("Parse chunk size must be at least 1")

    if SYNC_MIN_INTERVAL < 0:
        raise ConfigError("Sync interval must be non-negative")

    if KARAOKE_K_SCALE <= 0 or KARAOKE_KF_SCALE <= 0:
        raise ConfigError("Karaoke scale must be positive")

    if FETCH_TIMEOUT <= 0:
        raise ConfigError("Invalid fetch timeout")

# Validate config on import
validate_config()


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_sources(value: str) -> Tuple[str, ...]:
    return tuple(s.strip().lower() for s in value.split(",") if s.strip())


@dataclass(frozen=True)
class LyricsConfig:
    """Switches read by the lyrics core.

    The core never writes these; a player hands over a new instance
    (see ``with_changes``) when the user edits a setting.
    """

    enable_online_fetch: bool = False
    auto_save_online_lyrics: bool = True
    prefer_translation: bool = True
    user_offset: float = 0.0
    online_sources: Tuple[str, ...] = field(default_factory=lambda: ("netease",))
    cache_capacity: int = CACHE_CAPACITY
    karaoke_k_scale: float = KARAOKE_K_SCALE
    karaoke_kf_scale: float = KARAOKE_KF_SCALE

    def validate(self) -> "LyricsConfig":
        if abs(self.user_offset) > OFFSET_LIMIT:
            raise ConfigError(
                f"Lyrics offset must be between -{OFFSET_LIMIT:g} and +{OFFSET_LIMIT:g} seconds"
            )
        if self.cache_capacity < 1:
            raise ConfigError("Cache capacity must be at least 1")
        if self.karaoke_k_scale <= 0 or self.karaoke_kf_scale <= 0:
            raise ConfigError("Karaoke scale must be positive")
        unknown = [s for s in self.online_sources if s not in KNOWN_SOURCES]
        if unknown:
            raise ConfigError(
                f"Unknown lyrics source(s): {', '.join(unknown)}. "
                f"Available: {', '.join(KNOWN_SOURCES)}"
            )
        return self

    def with_changes(self, **changes) -> "LyricsConfig":
        return replace(self, **changes).validate()

    @classmethod
    def from_env(cls) -> "LyricsConfig":
        """Build a config from ``LYRICSYNC_*`` environment variables."""
        defaults = cls()
        try:
            offset = float(os.getenv("LYRICSYNC_OFFSET", str(defaults.user_offset)))
        except ValueError as e:
            raise ConfigError(f"Invalid LYRICSYNC_OFFSET: {e}") from e

        sources_env = os.getenv("LYRICSYNC_SOURCES")
        sources = _parse_sources(sources_env) if sources_env else defaults.online_sources

        config = cls(
            enable_online_fetch=_env_flag("LYRICSYNC_ONLINE", defaults.enable_online_fetch),
            auto_save_online_lyrics=_env_flag("LYRICSYNC_AUTO_SAVE", defaults.auto_save_online_lyrics),
            prefer_translation=_env_flag("LYRICSYNC_TRANSLATION", defaults.prefer_translation),
            user_offset=offset,
            online_sources=sources,
        )
        return config.validate()
