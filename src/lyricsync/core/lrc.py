"""LRC parsing into normalized lyric lines.

This module handles:
- LRC timestamp parsing
- Multi-timestamp lines (simple karaoke timings)
- Merging lines that share a start time (original + translation)
- Chunked parsing that yields to the event loop on large files
"""

import asyncio
import re
from typing import Dict, List, Optional, Tuple

from ..config import PARSE_CHUNK_SIZE
from ..utils.logging import get_logger
from .models import KaraokeTiming, KaraokeTimings, LyricLine, LyricSet

logger = get_logger(__name__)

# ----------------------
# LRC timestamp regex
# ----------------------
_LRC_TS_RE = re.compile(
    r"""
    \[
    (?:
        (?P<cmin>\d{1,3}):(?P<csec>\d{2}):(?P<ccs>\d{2})    # [mm:ss:cc]
    |
        (?P<min>\d{1,3}):(?P<sec>\d{2})                      # [mm:ss]
        (?:\.(?P<frac>\d{1,3}))?                             # optional .x/.xx/.xxx
    )
    \]
    """,
    re.VERBOSE,
)


def _match_seconds(match: "re.Match[str]") -> Optional[float]:
    if match.group("cmin") is not None:
        minutes = int(match.group("cmin"))
        seconds = int(match.group("csec"))
        frac_seconds = int(match.group("ccs")) / 100
    else:
        minutes = int(match.group("min"))
        seconds = int(match.group("sec"))
        frac = match.group("frac")
        frac_seconds = int(frac) / (10 ** len(frac)) if frac else 0.0
    if seconds >= 60:
        return None
    return minutes * 60 + seconds + frac_seconds


def time_key(seconds: float) -> int:
    """Millisecond identity used to decide that two timestamps are equal."""
    return int(round(seconds * 1000))


# ----------------------
# LRC timestamp parsing
# ----------------------
def parse_lrc_timestamp(ts: str) -> Optional[float]:
    """Parse a single LRC timestamp like [01:23.45] to seconds."""
    if not ts:
        return None
    match = _LRC_TS_RE.fullmatch(ts.strip())
    if not match:
        return None
    return _match_seconds(match)


def split_timestamps(line: str) -> Tuple[List[Tuple[str, float]], str]:
    """Split an LRC line into its valid timestamp tags and its text.

    Returns:
        Tuple of ([(tag_text, seconds), ...], text). Tags with an invalid
        value are removed from the text but not returned.
    """
    stamps: List[Tuple[str, float]] = []
    for match in _LRC_TS_RE.finditer(line):
        seconds = _match_seconds(match)
        if seconds is not None:
            stamps.append((match.group(0)[1:-1], seconds))
    text = _LRC_TS_RE.sub("", line).strip()
    return stamps, text


class _LrcAccumulator:
    """Collects parsed lines keyed by start time, in first-seen order."""

    def __init__(self) -> None:
        self._lines: Dict[int, Dict] = {}
        self.skipped = 0

    def feed(self, raw: str) -> None:
        stamps, text = split_timestamps(raw)
        if not stamps or not text:
            if raw.strip():
                self.skipped += 1
            return

        start_time = stamps[0][1]
        entry = self._lines.setdefault(
            time_key(start_time), {"time": start_time, "texts": [], "karaoke": None}
        )
        # Karaoke timing always describes texts[0]
        if len(stamps) > 1 and not entry["texts"]:
            entry["karaoke"] = KaraokeTimings(
                full_text=text,
                timings=tuple(
                    KaraokeTiming(time=seconds, position=i)
                    for i, (_, seconds) in enumerate(stamps[1:], start=1)
                ),
            )
        entry["texts"].append(text)

    def build(self) -> LyricSet:
        if self.skipped:
            logger.debug(f"Skipped {self.skipped} LRC lines without timestamp or text")
        return LyricSet.build(
            LyricLine(time=e["time"], texts=tuple(e["texts"]), karaoke=e["karaoke"])
            for e in self._lines.values()
        )


def parse_lrc(lrc_text: str) -> LyricSet:
    """Parse LRC text into a time-ordered lyric set."""
    if not lrc_text:
        return LyricSet()

    acc = _LrcAccumulator()
    for raw in lrc_text.splitlines():
        acc.feed(raw)
    return acc.build()


async def parse_lrc_async(lrc_text: str, chunk_size: int = PARSE_CHUNK_SIZE) -> LyricSet:
    """Parse LRC text, yielding to the event loop every ``chunk_size`` lines.

    Produces the same result as ``parse_lrc``.
    """
    if not lrc_text:
        return LyricSet()

    acc = _LrcAccumulator()
    for i, raw in enumerate(lrc_text.splitlines()):
        if i and i % chunk_size == 0:
            await asyncio.sleep(0)
        acc.feed(raw)
    return acc.build()


def has_timestamps(text: str) -> bool:
    """Check if text contains at least one valid LRC timestamp."""
    if not text:
        return False
    return any(
        _match_seconds(m) is not None for m in _LRC_TS_RE.finditer(text)
    )


def format_lrc_timestamp(seconds: float) -> str:
    """Format seconds as an LRC ``mm:ss.cc`` tag body."""
    centis = int(round(max(seconds, 0.0) * 100))
    minutes, centis = divmod(centis, 6000)
    secs, centis = divmod(centis, 100)
    return f"{minutes:02d}:{secs:02d}.{centis:02d}"
