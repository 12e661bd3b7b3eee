"""Lyrics format detection, parser dispatch and export."""

import re
from pathlib import Path
from typing import List, Optional

from ..config import PARSE_CHUNK_SIZE
from ..utils.logging import get_logger
from .ass import parse_ass, parse_ass_async
from .karaoke import DEFAULT_KARAOKE_SCALE, KaraokeScale
from .lrc import format_lrc_timestamp, parse_lrc, parse_lrc_async
from .models import LyricSet
from .srt import parse_srt

logger = get_logger(__name__)

LRC = "lrc"
ASS = "ass"
SRT = "srt"
AUTO = "auto"

_ASS_MARKERS = ("[Script Info]", "[V4+ Styles]", "[V4 Styles]", "[Events]")
_SRT_CUE_RE = re.compile(
    r"^\d+\s*\n\d{1,2}:\d{2}:\d{2},\d{3}\s*-->\s*\d{1,2}:\d{2}:\d{2},\d{3}",
    re.MULTILINE,
)

# Seconds a final exported cue stays on screen
LAST_CUE_DURATION = 5.0


def detect_format(content: str) -> str:
    """Guess the grammar of lyric text; LRC is the fallback."""
    if any(marker in content for marker in _ASS_MARKERS):
        return ASS
    if _SRT_CUE_RE.search(content.replace("\r\n", "\n")):
        return SRT
    return LRC


def format_from_path(path: str) -> Optional[str]:
    """Map a lyric file extension (``.lrc``, ``.ass``, ``.ssa``, ``.srt``) to a format."""
    suffix = Path(path).suffix.lower().lstrip(".")
    if suffix == "ssa":
        return ASS
    if suffix in (LRC, ASS, SRT):
        return suffix
    return None


def parse_lyrics(
    content: str, fmt: str = AUTO, scale: KaraokeScale = DEFAULT_KARAOKE_SCALE
) -> LyricSet:
    """Parse lyric text in the given format."""
    if not content:
        return LyricSet()

    fmt = (fmt or AUTO).lower()
    if fmt == AUTO:
        fmt = detect_format(content)

    if fmt == LRC:
        return parse_lrc(content)
    if fmt == ASS:
        return parse_ass(content, scale=scale)
    if fmt == SRT:
        return parse_srt(content)

    logger.warning(f"Unsupported lyrics format: {fmt}")
    return LyricSet()


async def parse_lyrics_async(
    content: str,
    fmt: str = AUTO,
    scale: KaraokeScale = DEFAULT_KARAOKE_SCALE,
    chunk_size: int = PARSE_CHUNK_SIZE,
) -> LyricSet:
    """Chunked variant of ``parse_lyrics`` for use on the event loop."""
    if not content:
        return LyricSet()

    fmt = (fmt or AUTO).lower()
    if fmt == AUTO:
        fmt = detect_format(content)

    if fmt == LRC:
        return await parse_lrc_async(content, chunk_size=chunk_size)
    if fmt == ASS:
        return await parse_ass_async(content, scale=scale, chunk_size=chunk_size)
    # SRT files are short; no chunking needed
    return parse_lyrics(content, fmt, scale=scale)


# ----------------------
# Export
# ----------------------
def _cue_end(lines: LyricSet, index: int) -> float:
    if index + 1 < len(lines):
        return lines[index + 1].time
    return lines[index].time + LAST_CUE_DURATION


def _ass_time(t: float) -> str:
    centis = int(round(max(t, 0.0) * 100))
    hours, centis = divmod(centis, 360000)
    minutes, centis = divmod(centis, 6000)
    seconds, centis = divmod(centis, 100)
    return f"{hours}:{minutes:02d}:{seconds:02d}.{centis:02d}"


def _srt_time(t: float) -> str:
    millis = int(round(max(t, 0.0) * 1000))
    hours, millis = divmod(millis, 3600000)
    minutes, millis = divmod(millis, 60000)
    seconds, millis = divmod(millis, 1000)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d},{millis:03d}"


def stringify_lrc(lines: LyricSet) -> str:
    """One row per text; a translation shares its original's timestamp."""
    rows: List[str] = []
    for line in lines:
        tag = format_lrc_timestamp(line.time)
        rows.extend(f"[{tag}]{text}" for text in line.texts)
    return "\n".join(rows)


_ASS_HEADER = """[Script Info]
Title: Lyrics
ScriptType: v4.00+

[V4+ Styles]
Format: Name, Fontname, Fontsize, PrimaryColour, SecondaryColour, OutlineColour, BackColour, Bold, Italic, Underline, StrikeOut, ScaleX, ScaleY, Spacing, Angle, BorderStyle, Outline, Shadow, Alignment, MarginL, MarginR, MarginV, Encoding
Style: Original,Arial,20,&H00FFFFFF,&H000000FF,&H00000000,&H00000000,0,0,0,0,100,100,0,0,1,2,0,2,0,0,0,1
Style: Translation,Arial,16,&H00FFFFFF,&H000000FF,&H00000000,&H00000000,0,0,0,0,100,100,0,0,1,2,0,2,0,0,0,1

[Events]
Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text
"""


def stringify_ass(lines: LyricSet) -> str:
    rows: List[str] = []
    for i, line in enumerate(lines):
        start, end = _ass_time(line.time), _ass_time(_cue_end(lines, i))
        for style, text in zip(("Original", "Translation"), line.texts):
            rows.append(f"Dialogue: 0,{start},{end},{style},,0,0,0,,{text}")
    return _ASS_HEADER + "\n".join(rows)


def stringify_srt(lines: LyricSet) -> str:
    cues: List[str] = []
    for i, line in enumerate(lines):
        timing = f"{_srt_time(line.time)} --> {_srt_time(_cue_end(lines, i))}"
        cues.append(f"{i + 1}\n{timing}\n" + "\n".join(line.texts) + "\n")
    return "\n".join(cues)


def stringify(lines: LyricSet, fmt: str = LRC) -> str:
    """Export a lyric set as LRC, ASS or SRT text."""
    if not lines:
        return ""
    fmt = (fmt or LRC).lower()
    if fmt == LRC:
        return stringify_lrc(lines)
    if fmt == ASS:
        return stringify_ass(lines)
    if fmt == SRT:
        return stringify_srt(lines)
    logger.warning(f"Unsupported export format: {fmt}")
    return ""

