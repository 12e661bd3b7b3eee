"""Merge a primary LRC text with its translation into one bilingual LRC."""

from typing import Dict, Tuple

from ..utils.logging import get_logger
from .lrc import split_timestamps, time_key

logger = get_logger(__name__)


def _rows_by_time(lrc_text: str) -> Dict[int, Tuple[float, str, str]]:
    """Map every timestamp in the text to (seconds, tag, text).

    A line carrying several timestamps yields one row per timestamp.
    Later rows win when two lines share a time.
    """
    rows: Dict[int, Tuple[float, str, str]] = {}
    for raw in lrc_text.splitlines():
        stamps, text = split_timestamps(raw)
        if not stamps or not text:
            continue
        for tag, seconds in stamps:
            rows[time_key(seconds)] = (seconds, tag, text)
    return rows


def merge_lyrics(primary: str, translation: str) -> str:
    """Interleave translation rows under the primary rows they match.

    Rows are matched on identical start time. Each primary row is
    followed by its translation under the same tag, so parsing the
    result groups them into one line. Translation rows with no primary
    counterpart are dropped.

    Args:
        primary: LRC text of the original lyrics
        translation: LRC text of the translated lyrics

    Returns:
        Merged LRC text, ordered by time
    """
    if not translation:
        return primary
    if not primary:
        return ""

    originals = _rows_by_time(primary)
    translated = _rows_by_time(translation)

    merged = []
    matched = 0
    for key in sorted(originals):
        _, tag, text = originals[key]
        merged.append(f"[{tag}]{text}")
        if key in translated:
            merged.append(f"[{tag}]{translated[key][2]}")
            matched += 1

    logger.debug(f"Merged translation: {matched}/{len(originals)} lines matched")
    return "\n".join(merged)
