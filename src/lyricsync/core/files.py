"""Filesystem access for lyric files stored next to audio tracks."""

import asyncio
from pathlib import Path
from typing import Optional, Protocol, Sequence

from ..config import LYRIC_EXTENSIONS
from ..utils.logging import get_logger

logger = get_logger(__name__)


class FileLookup(Protocol):
    """Lyric file operations the resolver depends on."""

    async def find_lyric_file(self, track_path: str) -> Optional[str]: ...

    async def read_file(self, path: str) -> str: ...

    async def write_file(self, path: str, text: str) -> bool: ...


def sibling_lyrics_path(track_path: str, ext: str = "lrc") -> str:
    """Path of the lyric file sharing the track's directory and base name."""
    return str(Path(track_path).with_suffix(f".{ext.lstrip('.')}"))


def find_sibling_lyrics(
    track_path: str, extensions: Sequence[str] = LYRIC_EXTENSIONS
) -> Optional[str]:
    """Return the first existing sibling lyric file, by extension priority."""
    if not track_path:
        return None
    for ext in extensions:
        candidate = Path(sibling_lyrics_path(track_path, ext))
        if candidate.is_file():
            return str(candidate)
    return None


class LocalFileLookup:
    """FileLookup over the local filesystem.

    Blocking calls run in a worker thread so the event loop keeps
    serving playback updates.
    """

    def __init__(self, extensions: Sequence[str] = LYRIC_EXTENSIONS):
        self.extensions = tuple(extensions)

    async def find_lyric_file(self, track_path: str) -> Optional[str]:
        found = await asyncio.to_thread(find_sibling_lyrics, track_path, self.extensions)
        if found:
            logger.debug(f"Found local lyrics: {found}")
        return found

    async def read_file(self, path: str) -> str:
        """Read a lyric file as text. OS errors propagate to the caller."""
        return await asyncio.to_thread(
            Path(path).read_text, encoding="utf-8-sig", errors="replace"
        )

    async def write_file(self, path: str, text: str) -> bool:
        """Write text to ``path``; returns False when the write fails."""

        def _write() -> None:
            target = Path(path)
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text, encoding="utf-8")

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            logger.warning(f"Could not write lyrics to {path}: {e}")
            return False
        logger.debug(f"Saved lyrics to {path}")
        return True
