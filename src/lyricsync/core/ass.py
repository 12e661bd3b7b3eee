"""ASS/SSA dialogue parsing into normalized lyric lines.

Dialogue events sharing the same start and end are grouped into one line.
The event's style decides whether its text is the original lyric or the
translation; karaoke tags on the original text become word segments.
"""

import asyncio
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from ..config import PARSE_CHUNK_SIZE
from ..utils.logging import get_logger
from .karaoke import DEFAULT_KARAOKE_SCALE, KaraokeScale, decompose_karaoke, strip_tags
from .models import KaraokeSegments, LyricLine, LyricSet

logger = get_logger(__name__)

DIALOGUE_PREFIX = "Dialogue:"
MIN_DIALOGUE_FIELDS = 10

_ASS_TIME_RE = re.compile(r"(\d+):(\d{1,2}):(\d+(?:\.\d+)?)")

ORIGINAL = "original"
TRANSLATION = "translation"

# Style name fragments (matched case-insensitively)
TRANSLATION_STYLE_KEYWORDS = (
    "ts", "translation", "trans", "cn", "zh", "chs", "cht", "chinese",
    "romaji", "roma", "chn", "翻译", "中文",
)
ORIGINAL_STYLE_KEYWORDS = (
    "orig", "original", "en", "english", "jp", "ja", "japanese",
    "main", "default", "lyric", "原文", "日文", "英文",
)


@dataclass(frozen=True)
class StyleSlotPolicy:
    """Maps a dialogue style name to the text slot it fills."""

    translation_keywords: Tuple[str, ...] = TRANSLATION_STYLE_KEYWORDS
    original_keywords: Tuple[str, ...] = ORIGINAL_STYLE_KEYWORDS

    def classify(self, style: str) -> Optional[str]:
        """Return ORIGINAL, TRANSLATION, or None for an unrecognized style.

        Translation keywords win over original keywords.
        """
        lowered = style.lower()
        if any(k in lowered for k in self.translation_keywords):
            return TRANSLATION
        if any(k in lowered for k in self.original_keywords):
            return ORIGINAL
        return None


DEFAULT_STYLE_POLICY = StyleSlotPolicy()


@dataclass
class _DialogueGroup:
    start: float
    end: float
    original: str = ""
    translation: str = ""

    def assign(self, style: str, text: str, policy: StyleSlotPolicy) -> None:
        if policy.classify(style) == TRANSLATION:
            self.translation = text
        elif not self.original:
            self.original = text
        elif not self.translation:
            # Original slot taken: next event of any other style is the translation
            self.translation = text


def parse_ass_time(value: str) -> Optional[float]:
    """Parse an ``h:mm:ss.cc`` time to seconds."""
    match = _ASS_TIME_RE.fullmatch(value.strip())
    if not match:
        return None
    hours, minutes, seconds = match.groups()
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


def parse_dialogue(line: str) -> Optional[Tuple[float, float, str, str]]:
    """Split a ``Dialogue:`` line into (start, end, style, text).

    Returns None for anything that is not a well-formed dialogue event.
    """
    if not line.startswith(DIALOGUE_PREFIX):
        return None
    parts = line.split(",")
    if len(parts) < MIN_DIALOGUE_FIELDS:
        return None
    start = parse_ass_time(parts[1])
    end = parse_ass_time(parts[2])
    if start is None or end is None:
        return None
    style = parts[3].strip()
    text = ",".join(parts[9:]).strip()
    return start, end, style, text


class _AssAccumulator:
    def __init__(self, policy: StyleSlotPolicy, scale: KaraokeScale) -> None:
        self.policy = policy
        self.scale = scale
        self._groups: Dict[Tuple[int, int], _DialogueGroup] = {}
        self.skipped = 0

    def feed(self, raw: str) -> None:
        if not raw.startswith(DIALOGUE_PREFIX):
            return
        event = parse_dialogue(raw.rstrip("\r\n"))
        if event is None:
            self.skipped += 1
            return
        start, end, style, text = event
        key = (int(round(start * 1000)), int(round(end * 1000)))
        group = self._groups.get(key)
        if group is None:
            group = self._groups[key] = _DialogueGroup(start=start, end=end)
        group.assign(style, text, self.policy)

    def build(self) -> LyricSet:
        """Turn the dialogue groups into lines.

        Empty slots are left out of ``texts``, so a group holding only a
        translation becomes a single-text line and is shown as the lyric.
        """
        if self.skipped:
            logger.debug(f"Skipped {self.skipped} malformed dialogue lines")

        lines: List[LyricLine] = []
        for group in self._groups.values():
            words = decompose_karaoke(group.original, group.start, self.scale)
            texts = tuple(
                t for t in (strip_tags(group.original), strip_tags(group.translation)) if t
            )
            if not texts:
                continue
            lines.append(
                LyricLine(
                    time=group.start,
                    texts=texts,
                    karaoke=KaraokeSegments(words=tuple(words)) if words else None,
                )
            )
        return LyricSet.build(lines)


def parse_ass(
    content: str,
    policy: StyleSlotPolicy = DEFAULT_STYLE_POLICY,
    scale: KaraokeScale = DEFAULT_KARAOKE_SCALE,
) -> LyricSet:
    """Parse ASS/SSA subtitle script text into a time-ordered lyric set."""
    if not content:
        return LyricSet()

    acc = _AssAccumulator(policy, scale)
    for raw in content.splitlines():
        acc.feed(raw)
    return acc.build()


async def parse_ass_async(
    content: str,
    policy: StyleSlotPolicy = DEFAULT_STYLE_POLICY,
    scale: KaraokeScale = DEFAULT_KARAOKE_SCALE,
    chunk_size: int = PARSE_CHUNK_SIZE,
) -> LyricSet:
    """Chunked variant of ``parse_ass`` that yields to the event loop."""
    if not content:
        return LyricSet()

    acc = _AssAccumulator(policy, scale)
    for i, raw in enumerate(content.splitlines()):
        if i and i % chunk_size == 0:
            await asyncio.sleep(0)
        acc.feed(raw)
    return acc.build()
