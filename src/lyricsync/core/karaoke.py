"""Karaoke tag decomposition for ASS/SSA dialogue text.

Inline duration tags ``{\\k<n>}`` and ``{\\kf<n>}`` precede the run of text
they time. ``n`` is in centiseconds. Segments are laid end to end starting
at the line's start time.
"""

import re
from dataclasses import dataclass
from typing import List

from ..config import KARAOKE_K_SCALE, KARAOKE_KF_SCALE
from .models import KaraokeWord

# {\k50}text or {\kf50}text, text running up to the next tag
_KARAOKE_TAG_RE = re.compile(r"\{\\(kf|k)(\d+)\}([^{}]*)")

# Any override block: {\b1}, {\pos(10,20)}, {comment}
_OVERRIDE_BLOCK_RE = re.compile(r"\{[^}]*\}")

# ASS hard and soft line breaks
_LINE_BREAK_RE = re.compile(r"\\[Nn]")


@dataclass(frozen=True)
class KaraokeScale:
    """Seconds per tag unit, per tag kind."""

    k: float = KARAOKE_K_SCALE
    kf: float = KARAOKE_KF_SCALE

    def duration(self, tag: str, value: int) -> float:
        scale = self.kf if tag == "kf" else self.k
        return value * scale


DEFAULT_KARAOKE_SCALE = KaraokeScale()

# Older players read \k in tenths of a second
LEGACY_KARAOKE_SCALE = KaraokeScale(k=0.1, kf=0.01)


def decompose_karaoke(
    text: str,
    start_time: float,
    scale: KaraokeScale = DEFAULT_KARAOKE_SCALE,
) -> List[KaraokeWord]:
    """Split tagged dialogue text into timed segments.

    Args:
        text: Raw dialogue text with override tags
        start_time: Start of the line in seconds
        scale: Tag unit policy

    Returns:
        Segments in order; empty if the text has no karaoke tags
    """
    words: List[KaraokeWord] = []
    elapsed = start_time
    for match in _KARAOKE_TAG_RE.finditer(text or ""):
        duration = scale.duration(match.group(1), int(match.group(2)))
        words.append(
            KaraokeWord(text=match.group(3), start_time=elapsed, end_time=elapsed + duration)
        )
        elapsed += duration
    return words


def strip_tags(text: str) -> str:
    """Remove override blocks and turn ASS line breaks into spaces."""
    if not text:
        return ""
    cleaned = _OVERRIDE_BLOCK_RE.sub("", text)
    cleaned = _LINE_BREAK_RE.sub(" ", cleaned)
    return " ".join(cleaned.split())
