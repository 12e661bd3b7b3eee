"""SRT subtitle parsing into lyric lines."""

import re
from typing import List, Optional

from ..utils.logging import get_logger
from .models import LyricLine, LyricSet

logger = get_logger(__name__)

_SRT_TIMING_RE = re.compile(
    r"(\d{1,2}):(\d{2}):(\d{2})[,.](\d{3})\s*-->\s*(\d{1,2}):(\d{2}):(\d{2})[,.](\d{3})"
)
_BLOCK_SPLIT_RE = re.compile(r"\n\s*\n")


def parse_srt_timing(line: str) -> Optional[float]:
    """Return the cue start in seconds from a ``a --> b`` timing line."""
    match = _SRT_TIMING_RE.search(line)
    if not match:
        return None
    hours, minutes, seconds, millis = (int(g) for g in match.groups()[:4])
    return hours * 3600 + minutes * 60 + seconds + millis / 1000


def parse_srt(content: str) -> LyricSet:
    """Parse SRT text; cues without a timing line or text are skipped."""
    if not content:
        return LyricSet()

    lines: List[LyricLine] = []
    skipped = 0
    normalized = content.replace("\r\n", "\n").strip()
    for block in _BLOCK_SPLIT_RE.split(normalized):
        rows = block.strip().split("\n")
        if len(rows) < 2:
            skipped += 1
            continue
        start = parse_srt_timing(rows[1])
        text = "\n".join(rows[2:]).strip()
        if start is None or not text:
            skipped += 1
            continue
        lines.append(LyricLine(time=start, texts=(text,)))

    if skipped:
        logger.debug(f"Skipped {skipped} malformed SRT blocks")
    return LyricSet.build(lines)
