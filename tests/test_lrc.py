"""Tests for LRC parsing."""

import asyncio

import pytest

from lyricsync.core.lrc import (
    format_lrc_timestamp,
    has_timestamps,
    parse_lrc,
    parse_lrc_async,
    parse_lrc_timestamp,
    split_timestamps,
    time_key,
)
from lyricsync.core.models import KaraokeTimings


class TestTimestamps:
    @pytest.mark.parametrize(
        "tag,expected",
        [
            ("[00:12.34]", 12.34),
            ("[01:02.5]", 62.5),
            ("[01:02.500]", 62.5),
            ("[1:02.05]", 62.05),
            ("[00:07]", 7.0),
            ("[00:01:50]", 1.5),
            ("[100:00.00]", 6000.0),
        ],
    )
    def test_valid_forms(self, tag, expected):
        assert parse_lrc_timestamp(tag) == pytest.approx(expected)

    @pytest.mark.parametrize("tag", ["", "[ti:Title]", "[00:61.00]", "[aa:bb.cc]", "00:01.00"])
    def test_invalid_forms(self, tag):
        assert parse_lrc_timestamp(tag) is None

    def test_split_timestamps_keeps_text(self):
        stamps, text = split_timestamps("[00:01.00][00:05.00]Chorus line")
        assert [s for _, s in stamps] == [1.0, 5.0]
        assert stamps[0][0] == "00:01.00"
        assert text == "Chorus line"

    def test_has_timestamps(self):
        assert has_timestamps("[00:01.00]Line")
        assert not has_timestamps("[ti:Only metadata]")
        assert not has_timestamps("")

    def test_format_lrc_timestamp(self):
        assert format_lrc_timestamp(62.5) == "01:02.50"
        assert format_lrc_timestamp(0) == "00:00.00"
        assert format_lrc_timestamp(-3) == "00:00.00"

    def test_time_key_is_millisecond_identity(self):
        assert time_key(1.0) == time_key(0.9999999)
        assert time_key(1.0) != time_key(1.001)


class TestParseLrc:
    def test_sample(self, sample_lrc):
        lines = parse_lrc(sample_lrc)
        assert len(lines) == 3
        assert lines.times == pytest.approx([1.0, 3.5, 7.25])
        assert lines[0].texts == ("First line",)

    def test_metadata_and_empty_lines_dropped(self):
        text = "[ti:Title]\n\n[00:01.00]\n[00:02.00]   \nno tags here\n[00:03.00]Real\n"
        lines = parse_lrc(text)
        assert [line.text for line in lines] == ["Real"]

    def test_same_time_lines_group_into_texts(self):
        lines = parse_lrc("[00:12.34]Hello\n[00:12.34]你好\n[00:15.00]World")
        assert len(lines) == 2
        assert lines[0].time == pytest.approx(12.34)
        assert lines[0].texts == ("Hello", "你好")
        assert lines[0].translation == "你好"
        assert lines[1].texts == ("World",)
        assert lines[1].translation is None

    def test_output_sorted_by_time(self):
        lines = parse_lrc("[00:09.00]C\n[00:01.00]A\n[00:05.00]B")
        assert [line.text for line in lines] == ["A", "B", "C"]

    def test_multiple_timestamps_become_karaoke_timings(self):
        lines = parse_lrc("[00:01.00][00:01.50][00:02.00]La la la")
        assert len(lines) == 1
        line = lines[0]
        assert line.time == pytest.approx(1.0)
        assert isinstance(line.karaoke, KaraokeTimings)
        assert line.karaoke.full_text == "La la la"
        assert [t.time for t in line.karaoke.timings] == pytest.approx([1.5, 2.0])
        assert [t.position for t in line.karaoke.timings] == [1, 2]

    def test_karaoke_belongs_to_primary_text(self):
        lines = parse_lrc(
            "[00:01.00][00:01.50]Hel lo\n"
            "[00:01.00][00:01.20][00:01.80]Hal lo du"
        )
        line = lines[0]
        assert line.texts == ("Hel lo", "Hal lo du")
        assert line.karaoke.full_text == "Hel lo"
        assert [t.time for t in line.karaoke.timings] == pytest.approx([1.5])

    def test_translation_stamps_do_not_add_karaoke(self):
        lines = parse_lrc("[00:01.00]Plain\n[00:01.00][00:01.50]Translated")
        assert lines[0].texts == ("Plain", "Translated")
        assert lines[0].karaoke is None

    def test_invalid_tags_do_not_break_line(self):
        lines = parse_lrc("[00:75.00]Bad\n[00:02.00]Good")
        assert [line.text for line in lines] == ["Good"]

    def test_crlf_input(self):
        lines = parse_lrc("[00:01.00]A\r\n[00:02.00]B\r\n")
        assert [line.text for line in lines] == ["A", "B"]

    def test_empty_input(self):
        assert parse_lrc("").is_empty()

    def test_two_plain_lines(self):
        lines = parse_lrc("[00:01.00]Hello\n[00:02.50]World")
        assert lines.times == pytest.approx([1.0, 2.5])
        assert all(line.karaoke is None for line in lines)

    def test_two_stamps_one_line(self):
        lines = parse_lrc("[00:01.00][00:01.50]Hi")
        assert len(lines) == 1
        assert lines[0].text == "Hi"
        assert lines[0].karaoke.timings[0].time == pytest.approx(1.5)
        assert lines[0].karaoke.timings[0].position == 1

    def test_parsing_is_idempotent(self, sample_lrc):
        assert parse_lrc(sample_lrc) == parse_lrc(sample_lrc)


class TestParseLrcAsync:
    def test_matches_sync_parser(self):
        text = "\n".join(f"[{i // 60:02d}:{i % 60:02d}.00]Line {i}" for i in range(350))
        expected = parse_lrc(text)
        result = asyncio.run(parse_lrc_async(text, chunk_size=50))
        assert result == expected
        assert len(result) == 350

    def test_yields_to_event_loop(self):
        text = "\n".join(f"[00:{i % 60:02d}.{i % 100:02d}]L{i}" for i in range(250))
        ticks = []

        async def ticker():
            while True:
                ticks.append(1)
                await asyncio.sleep(0)

        async def main():
            task = asyncio.ensure_future(ticker())
            await asyncio.sleep(0)
            before = len(ticks)
            await parse_lrc_async(text, chunk_size=100)
            after = len(ticks)
            task.cancel()
            return after - before

        assert asyncio.run(main()) >= 2
