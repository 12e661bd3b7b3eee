"""NetEase Cloud Music lyric search.

Network logic only: song search, lyric download and picking the search
result that best matches a track. Parsing happens elsewhere.
"""

import re
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import requests  # type: ignore[import-untyped]

from ..config import FETCH_MAX_RETRIES, FETCH_TIMEOUT
from ..exceptions import FetchError
from ..utils.logging import get_logger
from ..utils.retry import retry_with_backoff

logger = get_logger(__name__)

SEARCH_URL = "https://music.163.com/api/cloudsearch/pc"
LYRIC_URL = "https://music.163.com/api/song/lyric"
SEARCH_LIMIT = 10

DEFAULT_HEADERS = {
    "Accept": "*/*",
    "Accept-Language": "zh-CN,zh;q=0.9",
    "Content-Type": "application/x-www-form-urlencoded",
    "Referer": "https://music.163.com/",
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36",
}

# Scores for find_best_match
TITLE_EXACT_SCORE = 100
TITLE_PARTIAL_SCORE = 50
ARTIST_EXACT_SCORE = 50
ARTIST_PARTIAL_SCORE = 25
DURATION_CLOSE_SCORE = 30  # within 3 s
DURATION_NEAR_SCORE = 15  # within 10 s
MIN_MATCH_SCORE = 50

_SEPARATORS_RE = re.compile(r"[\s\-_.]")
_PARENTHESIZED_RE = re.compile(r"[（(][^）)]*[）)]")


@dataclass(frozen=True)
class NeteaseSong:
    """A cloudsearch result."""

    id: str
    name: str
    artist: str = ""
    album: str = ""
    duration_ms: int = 0


@dataclass(frozen=True)
class NeteaseLyrics:
    """Lyric texts of one song; missing parts are empty strings."""

    lrc: str = ""
    tlyric: str = ""
    romalrc: str = ""


def normalize_title(value: str) -> str:
    """Lowercase and drop separators and parenthesized parts for comparison."""
    value = _SEPARATORS_RE.sub("", value.lower())
    return _PARENTHESIZED_RE.sub("", value).strip()


def _partial_match(a: str, b: str) -> bool:
    return a in b or b in a


def score_song(song: NeteaseSong, title: str, artist: str = "", duration_ms: int = 0) -> int:
    """Score how well a search result matches the requested track."""
    score = 0

    wanted_title = normalize_title(title)
    song_title = normalize_title(song.name)
    if song_title == wanted_title:
        score += TITLE_EXACT_SCORE
    elif _partial_match(song_title, wanted_title):
        score += TITLE_PARTIAL_SCORE

    if artist:
        wanted_artist = normalize_title(artist)
        song_artist = normalize_title(song.artist)
        if song_artist == wanted_artist:
            score += ARTIST_EXACT_SCORE
        elif _partial_match(song_artist, wanted_artist):
            score += ARTIST_PARTIAL_SCORE

    if duration_ms > 0 and song.duration_ms > 0:
        diff = abs(duration_ms - song.duration_ms)
        if diff < 3000:
            score += DURATION_CLOSE_SCORE
        elif diff < 10000:
            score += DURATION_NEAR_SCORE

    return score


def find_best_match(
    songs: List[NeteaseSong], title: str, artist: str = "", duration_ms: int = 0
) -> Optional[NeteaseSong]:
    """Return the highest scoring song, or None if none reaches MIN_MATCH_SCORE."""
    best: Optional[NeteaseSong] = None
    best_score = -1
    for song in songs:
        score = score_song(song, title, artist, duration_ms)
        if score > best_score:
            best, best_score = song, score
    if best is None or best_score < MIN_MATCH_SCORE:
        return None
    logger.debug(f"Best NetEase match: {best.name} - {best.artist} (score {best_score})")
    return best


def _parse_song(item: Dict) -> NeteaseSong:
    artists = item.get("ar") or []
    album = item.get("al") or {}
    return NeteaseSong(
        id=str(item["id"]),
        name=item.get("name", ""),
        artist="/".join(a.get("name", "") for a in artists),
        album=album.get("name", ""),
        duration_ms=int(item.get("dt") or 0),
    )


class NeteaseClient:
    """Blocking NetEase API client built on a requests session."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = FETCH_TIMEOUT,
        max_retries: int = FETCH_MAX_RETRIES,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session = session or requests.Session()
        self.timeout = timeout
        self._request = retry_with_backoff(
            max_retries=max_retries,
            exceptions=(requests.exceptions.RequestException,),
            sleep=sleep,
        )(self._request_once)

    def _request_once(self, method: str, url: str, **kwargs) -> requests.Response:
        response = self.session.request(
            method, url, headers=DEFAULT_HEADERS, timeout=self.timeout, **kwargs
        )
        response.raise_for_status()
        return response

    def _call(self, method: str, url: str, **kwargs) -> Dict:
        try:
            response = self._request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            raise FetchError(f"NetEase request failed: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            snippet = response.text[:200]
            raise FetchError(f"NetEase returned invalid JSON: {snippet}") from e

        code = data.get("code")
        if code != 200:
            raise FetchError(f"NetEase API error: code {code}")
        return data

    def search_songs(self, keyword: str, limit: int = SEARCH_LIMIT, offset: int = 0) -> List[NeteaseSong]:
        """Search songs by keyword."""
        data = self._call(
            "POST",
            SEARCH_URL,
            data={"s": keyword, "type": "1", "limit": str(limit), "offset": str(offset)},
        )
        result = data.get("result") or {}
        songs = [_parse_song(item) for item in result.get("songs") or [] if "id" in item]
        logger.debug(f"NetEase search '{keyword}': {len(songs)} results")
        return songs

    def get_lyrics(self, song_id: str) -> NeteaseLyrics:
        """Download the lyric, translation and romanization texts of a song."""
        data = self._call(
            "GET",
            LYRIC_URL,
            params={"id": song_id, "lv": "-1", "tv": "-1", "rv": "-1", "kv": "-1"},
        )

        def _text(key: str) -> str:
            return (data.get(key) or {}).get("lyric") or ""

        return NeteaseLyrics(lrc=_text("lrc"), tlyric=_text("tlyric"), romalrc=_text("romalrc"))

    def search_and_get_lyrics(
        self, title: str, artist: str = "", duration_ms: int = 0
    ) -> Optional[NeteaseLyrics]:
        """Find the best matching song for a track and download its lyrics.

        Falls back to a title-only search when "title artist" finds nothing,
        and to the first result when no song scores high enough.
        """
        keyword = f"{title} {artist}" if artist else title
        songs = self.search_songs(keyword)
        if not songs and artist:
            songs = self.search_songs(title)
        if not songs:
            logger.debug(f"No NetEase results for '{keyword}'")
            return None

        match = find_best_match(songs, title, artist, duration_ms) or songs[0]
        return self.get_lyrics(match.id)
