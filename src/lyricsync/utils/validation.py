"""Validation utilities."""

import logging
from pathlib import Path

from ..config import OFFSET_LIMIT
from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

LYRIC_FORMATS = ("lrc", "ass", "srt")


def validate_offset(offset: float) -> float:
    """Validate lyrics timing offset."""
    if abs(offset) > OFFSET_LIMIT:
        raise ValidationError(
            f"Lyrics offset must be between -{OFFSET_LIMIT:g} and +{OFFSET_LIMIT:g} seconds"
        )
    return offset


def validate_capacity(capacity: int) -> int:
    """Validate a cache capacity."""
    if capacity < 1:
        raise ValidationError(f"Cache capacity must be at least 1, got {capacity}")
    return capacity


def validate_format(fmt: str, allow_auto: bool = True) -> str:
    """Validate and normalize a lyrics format name."""
    normalized = (fmt or "").strip().lower()
    if allow_auto and normalized == "auto":
        return normalized
    if normalized not in LYRIC_FORMATS:
        raise ValidationError(
            f"Unsupported lyrics format: {fmt}. Use one of: {', '.join(LYRIC_FORMATS)}"
        )
    return normalized


def validate_track_path(path: str) -> Path:
    """Validate and normalize an audio track path."""
    if not path or not str(path).strip():
        raise ValidationError("Track path cannot be empty")

    track_path = Path(path).expanduser()
    if track_path.name in ("", ".", ".."):
        raise ValidationError(f"Not a track file: {path}")

    if not track_path.exists():
        logger.debug(f"Track file does not exist (lookup continues): {track_path}")
    return track_path
