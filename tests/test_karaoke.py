"""Tests for karaoke tag decomposition."""

import pytest

from lyricsync.core.karaoke import (
    DEFAULT_KARAOKE_SCALE,
    LEGACY_KARAOKE_SCALE,
    KaraokeScale,
    decompose_karaoke,
    strip_tags,
)
from lyricsync.core.models import KaraokeSegments, KaraokeWord


def test_decompose_consecutive_tags():
    words = decompose_karaoke("{\\k50}Hel{\\k30}lo", 10.0)
    assert [w.text for w in words] == ["Hel", "lo"]
    assert words[0].start_time == pytest.approx(10.0)
    assert words[0].end_time == pytest.approx(10.5)
    assert words[1].start_time == pytest.approx(10.5)
    assert words[1].end_time == pytest.approx(10.8)


def test_kf_uses_centiseconds():
    words = decompose_karaoke("{\\kf100}Long", 0.0)
    assert words[0].end_time == pytest.approx(1.0)


def test_segments_are_contiguous():
    words = decompose_karaoke("{\\k10}a{\\k20}b{\\kf30}c{\\k0}d", 2.0)
    for prev, nxt in zip(words, words[1:]):
        assert nxt.start_time == pytest.approx(prev.end_time)
    assert words[-1].end_time == pytest.approx(2.6)
    # zero-length segment is kept
    assert words[-1].start_time == words[-1].end_time


def test_legacy_scale_reads_k_in_tenths():
    words = decompose_karaoke("{\\k5}a{\\kf50}b", 0.0, LEGACY_KARAOKE_SCALE)
    assert words[0].end_time == pytest.approx(0.5)
    assert words[1].end_time == pytest.approx(1.0)


def test_custom_scale():
    scale = KaraokeScale(k=0.02, kf=0.01)
    assert scale.duration("k", 10) == pytest.approx(0.2)
    assert scale.duration("kf", 10) == pytest.approx(0.1)
    assert DEFAULT_KARAOKE_SCALE.duration("k", 10) == pytest.approx(0.1)


def test_no_tags_gives_no_segments():
    assert decompose_karaoke("Plain text", 1.0) == []
    assert decompose_karaoke("", 1.0) == []


def test_uppercase_tag_is_not_karaoke():
    assert decompose_karaoke("{\\K50}Loud", 0.0) == []


def test_strip_tags():
    assert strip_tags("{\\k50}Hel{\\k30}lo") == "Hello"
    assert strip_tags("{\\b1}Bold{\\b0}\\Nnext   line") == "Bold next line"
    assert strip_tags("") == ""


def test_karaoke_segments_end_time():
    segments = KaraokeSegments(
        words=(KaraokeWord("a", 0.0, 0.5), KaraokeWord("b", 0.5, 1.25))
    )
    assert segments.end_time == pytest.approx(1.25)
    assert KaraokeSegments().end_time == 0.0


def test_word_validate():
    KaraokeWord("ok", 1.0, 1.0).validate()
    with pytest.raises(ValueError):
        KaraokeWord("bad", 2.0, 1.0).validate()
    with pytest.raises(ValueError):
        KaraokeWord("neg", -1.0, 1.0).validate()


def test_k_and_kf_fifty_are_half_a_second():
    k = decompose_karaoke("{\\k50}a", 0.0)
    kf = decompose_karaoke("{\\kf50}a", 0.0)
    assert k[0].end_time == pytest.approx(0.5)
    assert kf[0].end_time == pytest.approx(0.5)
