"""Utility modules."""

from .logging import setup_logging, get_logger
from .validation import (
    validate_offset,
    validate_capacity,
    validate_format,
    validate_track_path,
)
from .cache import LyricsCache

__all__ = [
    "setup_logging",
    "get_logger",
    "validate_offset",
    "validate_capacity",
    "validate_format",
    "validate_track_path",
    "LyricsCache",
]
