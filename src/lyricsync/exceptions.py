"""Custom exceptions for lyricsync."""

class LyricSyncError(Exception):
    """Base exception for lyricsync."""
    pass

class LyricsError(LyricSyncError):
    """Error reading or processing lyrics."""
    pass

class FetchError(LyricSyncError):
    """Error fetching lyrics from an online provider."""
    pass

class WritebackError(LyricSyncError):
    """Error saving fetched lyrics next to the audio file."""
    pass

class ValidationError(LyricSyncError):
    """Invalid input parameters."""
    pass

class ConfigError(LyricSyncError):
    """Invalid configuration."""
    pass
