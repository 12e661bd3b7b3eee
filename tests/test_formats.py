"""Tests for SRT parsing, format detection and export."""

import asyncio

import pytest

from lyricsync.core.formats import (
    detect_format,
    format_from_path,
    parse_lyrics,
    parse_lyrics_async,
    stringify,
)
from lyricsync.core.lrc import parse_lrc
from lyricsync.core.srt import parse_srt, parse_srt_timing


class TestSrt:
    def test_sample(self, sample_srt):
        lines = parse_srt(sample_srt)
        assert lines.times == pytest.approx([1.0, 4.5])
        assert lines[0].texts == ("First cue",)
        assert lines[1].texts == ("Second cue\ncontinues",)

    def test_timing_accepts_dot(self):
        assert parse_srt_timing("00:01:02.500 --> 00:01:03.000") == pytest.approx(62.5)
        assert parse_srt_timing("not a timing") is None

    def test_malformed_blocks_skipped(self):
        text = "1\nnot timing\ntext\n\n2\n00:00:02,000 --> 00:00:03,000\nok\n\n3\n"
        lines = parse_srt(text)
        assert [line.text for line in lines] == ["ok"]

    def test_crlf(self):
        text = "1\r\n00:00:01,000 --> 00:00:02,000\r\nHi\r\n\r\n"
        assert parse_srt(text)[0].text == "Hi"


class TestDetection:
    def test_detect(self, sample_lrc, sample_ass, sample_srt):
        assert detect_format(sample_lrc) == "lrc"
        assert detect_format(sample_ass) == "ass"
        assert detect_format(sample_srt) == "srt"
        assert detect_format("just words") == "lrc"

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("/music/a.lrc", "lrc"),
            ("/music/a.ASS", "ass"),
            ("/music/a.ssa", "ass"),
            ("/music/a.srt", "srt"),
            ("/music/a.txt", None),
            ("/music/a", None),
        ],
    )
    def test_format_from_path(self, path, expected):
        assert format_from_path(path) == expected


class TestDispatch:
    def test_auto(self, sample_lrc, sample_ass, sample_srt):
        assert len(parse_lyrics(sample_lrc)) == 3
        assert len(parse_lyrics(sample_ass)) == 2
        assert len(parse_lyrics(sample_srt)) == 2

    def test_explicit_format_wins(self, sample_lrc):
        assert parse_lyrics(sample_lrc, "srt").is_empty()

    def test_unknown_format(self, sample_lrc, caplog):
        assert parse_lyrics(sample_lrc, "vtt").is_empty()
        assert "Unsupported lyrics format" in caplog.text

    def test_async(self, sample_lrc, sample_ass, sample_srt):
        for text in (sample_lrc, sample_ass, sample_srt):
            assert asyncio.run(parse_lyrics_async(text)) == parse_lyrics(text)


class TestStringify:
    def test_lrc_translation_shares_tag(self):
        lines = parse_lrc("[00:01.00]Hello\n[00:01.00]Hallo\n[00:03.50]World")
        assert stringify(lines, "lrc") == (
            "[00:01.00]Hello\n[00:01.00]Hallo\n[00:03.50]World"
        )

    def test_lrc_export_parses_back(self, sample_lrc):
        lines = parse_lrc(sample_lrc)
        assert parse_lrc(stringify(lines, "lrc")) == lines

    def test_ass(self):
        lines = parse_lrc("[00:01.00]Hello\n[00:01.00]Hallo\n[00:03.50]World")
        ass = stringify(lines, "ass")
        assert "[Events]" in ass
        assert "Dialogue: 0,0:00:01.00,0:00:03.50,Original,,0,0,0,,Hello" in ass
        assert "Dialogue: 0,0:00:01.00,0:00:03.50,Translation,,0,0,0,,Hallo" in ass
        # last line lasts five seconds
        assert "Dialogue: 0,0:00:03.50,0:00:08.50,Original,,0,0,0,,World" in ass
        assert parse_lyrics(ass).lines[0].texts == ("Hello", "Hallo")

    def test_srt(self):
        lines = parse_lrc("[00:01.00]Hello\n[00:01.00]Hallo\n[01:03.50]World")
        srt = stringify(lines, "srt")
        assert srt.startswith("1\n00:00:01,000 --> 00:01:03,500\nHello\nHallo\n")
        assert "2\n00:01:03,500 --> 00:01:08,500\nWorld\n" in srt
        assert detect_format(srt) == "srt"

    def test_empty_and_unknown(self, sample_lrc):
        assert stringify(parse_lrc(""), "lrc") == ""
        assert stringify(parse_lrc(sample_lrc), "vtt") == ""
