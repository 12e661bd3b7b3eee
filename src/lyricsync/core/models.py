"""Data models for timed lyrics and their resolution."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple, Union


class LyricsSource(str, Enum):
    """Where a resolved lyric set came from."""

    LOCAL = "local"
    ONLINE = "online"


@dataclass(frozen=True)
class KaraokeTiming:
    """An extra timestamp inside a multi-timestamp LRC line."""

    time: float
    position: int


@dataclass(frozen=True)
class KaraokeTimings:
    """Simple karaoke form: full text plus the timestamps after the first."""

    full_text: str
    timings: Tuple[KaraokeTiming, ...] = ()


@dataclass(frozen=True)
class KaraokeWord:
    """A sung segment with explicit start and end."""

    text: str
    start_time: float
    end_time: float

    def validate(self) -> None:
        if self.start_time < 0 or self.end_time < 0:
            raise ValueError("Word timing must be non-negative")
        if self.end_time < self.start_time:
            raise ValueError("Word end_time must be >= start_time")


@dataclass(frozen=True)
class KaraokeSegments:
    """Segment karaoke form, decomposed from inline duration tags."""

    words: Tuple[KaraokeWord, ...] = ()

    @property
    def end_time(self) -> float:
        return self.words[-1].end_time if self.words else 0.0


Karaoke = Union[KaraokeTimings, KaraokeSegments]


@dataclass(frozen=True)
class LyricLine:
    """One displayable line: primary text first, translation second."""

    time: float
    texts: Tuple[str, ...] = ()
    karaoke: Optional[Karaoke] = None

    @property
    def text(self) -> str:
        return self.texts[0] if self.texts else ""

    @property
    def translation(self) -> Optional[str]:
        return self.texts[1] if len(self.texts) > 1 else None


@dataclass(frozen=True)
class LyricSet:
    """Lines ordered by start time; equal times keep their input order."""

    lines: Tuple[LyricLine, ...] = ()

    @classmethod
    def build(cls, lines: Iterable[LyricLine]) -> "LyricSet":
        # sorted() is stable, so ties stay in input order
        return cls(tuple(sorted(lines, key=lambda line: line.time)))

    @property
    def times(self) -> List[float]:
        return [line.time for line in self.lines]

    def is_empty(self) -> bool:
        return not self.lines

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[LyricLine]:
        return iter(self.lines)

    def __getitem__(self, index: int) -> LyricLine:
        return self.lines[index]

    def __bool__(self) -> bool:
        return bool(self.lines)


EMPTY_LYRICS = LyricSet()


@dataclass(frozen=True)
class Track:
    """The audio track lyrics are resolved for, as reported by the player."""

    path: str
    title: Optional[str] = None
    artist: Optional[str] = None
    duration: Optional[float] = None  # seconds

    @property
    def search_title(self) -> str:
        """Title used for online search, falling back to the file name."""
        if self.title and self.title.strip():
            return self.title.strip()
        return Path(self.path).stem

    @property
    def duration_ms(self) -> int:
        if not self.duration or self.duration <= 0:
            return 0
        return int(round(self.duration * 1000))

    @classmethod
    def coerce(cls, track: Union["Track", str, Path]) -> "Track":
        if isinstance(track, Track):
            return track
        return cls(path=str(track))


@dataclass(frozen=True)
class ResolvedLyrics:
    """Result of one resolution request for a track."""

    lines: LyricSet
    source: LyricsSource
    raw_text: str = ""
    track_path: str = ""
    lyrics_path: Optional[str] = None
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        return bool(self.lines)

    @classmethod
    def not_found(cls, track_path: str, error: Optional[str] = None) -> "ResolvedLyrics":
        return cls(
            lines=EMPTY_LYRICS,
            source=LyricsSource.LOCAL,
            track_path=track_path,
            error=error,
        )


@dataclass
class SyncState:
    """Active line bookkeeping owned by a SyncTracker."""

    active_index: int = -1
    last_update: Optional[float] = None  # monotonic seconds

    def reset(self) -> None:
        self.active_index = -1
        self.last_update = None
