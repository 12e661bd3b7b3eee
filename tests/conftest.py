"""Test configuration and fixtures.

Provides reusable fixtures for:
- Temporary files and directories
- Sample LRC, ASS and SRT texts
- Fake lyric providers and file lookups (no network, optional no disk)
"""

import asyncio
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from lyricsync.config import LyricsConfig
from lyricsync.core.providers import ProviderResult
from lyricsync.exceptions import FetchError


def pytest_addoption(parser):
    parser.addoption(
        "--run-network",
        action="store_true",
        default=False,
        help="Run tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    run_network = config.getoption("--run-network") or os.getenv(
        "RUN_INTEGRATION_TESTS"
    ) == "1"
    if run_network:
        return

    skip_network = pytest.mark.skip(
        reason="requires network access (use --run-network or RUN_INTEGRATION_TESTS=1)"
    )
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip_network)


# =============================================================================
# Basic Fixtures
# =============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def track_file(temp_dir):
    """An (empty) audio file to resolve lyrics for."""
    track = temp_dir / "Song.mp3"
    track.write_bytes(b"")
    return track


# =============================================================================
# Lyric Texts
# =============================================================================


@pytest.fixture
def sample_lrc():
    return (
        "[ti:Sample]\n"
        "[ar:Someone]\n"
        "[00:01.00]First line\n"
        "[00:03.50]Second line\n"
        "[00:07.25]Third line\n"
    )


@pytest.fixture
def sample_translation_lrc():
    return (
        "[00:01.00]Erste Zeile\n"
        "[00:03.50]Zweite Zeile\n"
        "[00:09.00]Unmatched\n"
    )


@pytest.fixture
def sample_ass():
    return (
        "[Script Info]\n"
        "Title: Sample\n"
        "\n"
        "[Events]\n"
        "Format: Layer, Start, End, Style, Name, MarginL, MarginR, MarginV, Effect, Text\n"
        "Dialogue: 0,0:00:01.00,0:00:03.00,Original,,0,0,0,,{\\k50}Hel{\\k50}lo\n"
        "Dialogue: 0,0:00:01.00,0:00:03.00,Translation,,0,0,0,,Hallo\n"
        "Dialogue: 0,0:00:04.00,0:00:06.00,Default,,0,0,0,,Plain, with comma\n"
    )


@pytest.fixture
def sample_srt():
    return (
        "1\n"
        "00:00:01,000 --> 00:00:03,000\n"
        "First cue\n"
        "\n"
        "2\n"
        "00:00:04,500 --> 00:00:06,000\n"
        "Second cue\n"
        "continues\n"
    )


# =============================================================================
# Fakes
# =============================================================================


class FakeProvider:
    """LyricProvider returning a fixed result and recording its calls."""

    name = "fake"

    def __init__(
        self,
        result: Optional[ProviderResult] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        self.result = result
        self.error = error
        self.delay = delay
        self.calls: List[tuple] = []

    async def search(self, title, artist, duration_ms):
        self.calls.append((title, artist, duration_ms))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.result


class MemoryFileLookup:
    """FileLookup over an in-memory dict of path -> text."""

    def __init__(self, files: Optional[Dict[str, str]] = None, writable: bool = True):
        self.files = dict(files or {})
        self.writable = writable
        self.reads: List[str] = []
        self.writes: List[str] = []
        self.unreadable: set = set()

    async def find_lyric_file(self, track_path):
        stem = str(Path(track_path).with_suffix(""))
        for ext in ("lrc", "ass", "srt"):
            candidate = f"{stem}.{ext}"
            if candidate in self.files:
                return candidate
        return None

    async def read_file(self, path):
        self.reads.append(path)
        if path in self.unreadable:
            raise PermissionError(f"Permission denied: {path}")
        return self.files[path]

    async def write_file(self, path, text):
        self.writes.append(path)
        if not self.writable:
            return False
        self.files[path] = text
        return True


@pytest.fixture
def fake_provider_factory():
    return FakeProvider


@pytest.fixture
def memory_files():
    return MemoryFileLookup()


@pytest.fixture
def online_config():
    return LyricsConfig(enable_online_fetch=True, auto_save_online_lyrics=False)


@pytest.fixture
def failing_provider():
    return FakeProvider(error=FetchError("service unavailable"))


@pytest.fixture
def memory_files_factory():
    return MemoryFileLookup
