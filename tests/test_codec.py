from __future__ import annotations

import pytest

from helpers import SJIS_AIUEO
from textstream.buffer import TextBuffer
from textstream.codec import IncrementalCodecDecoder, lookup_text_codec
from textstream.errors import INCOMPLETE_SEQUENCE


def test_lookup_resolves_aliases() -> None:
    assert lookup_text_codec("sjis").name == "shift_jis"
    assert IncrementalCodecDecoder("SJIS").encoding == "shift_jis"


@pytest.mark.parametrize("name", ["no-such-encoding", "rot13", "base64"])
def test_lookup_rejects_unknown_and_binary_codecs(name: str) -> None:
    with pytest.raises(LookupError):
        lookup_text_codec(name)


def test_feed_leaves_incomplete_tail_unconsumed() -> None:
    dec = IncrementalCodecDecoder("sjis")
    out = TextBuffer()

    consumed, failure = dec.feed(SJIS_AIUEO[:3], out)

    assert (consumed, failure) == (2, None)
    assert out == "あ"

    incomplete = dec.finish(out)
    assert incomplete is not None
    assert incomplete.cause == INCOMPLETE_SEQUENCE
    assert incomplete.incomplete

    # The tail is fed again together with the bytes that complete it.
    consumed, failure = dec.feed(SJIS_AIUEO[2:4], out)
    assert (consumed, failure) == (2, None)
    assert out == "あい"
    assert dec.finish(out) is None


def test_feed_reports_invalid_range() -> None:
    dec = IncrementalCodecDecoder("utf-8")
    out = TextBuffer()

    consumed, failure = dec.feed(b"ab\xffcd", out)

    assert consumed == 2
    assert failure is not None
    assert failure.upto == 3
    assert not failure.incomplete
    assert "invalid start byte" in failure.cause
    assert out == "ab"
    assert dec.finish(out) is None


def test_shift_state_survives_between_feeds() -> None:
    data = "日本abc".encode("iso2022_jp")
    escape = data.index(b"B") + 1  # end of ESC $ B
    dec = IncrementalCodecDecoder("iso2022_jp")
    out = TextBuffer()

    consumed, _ = dec.feed(data[:escape], out)
    assert consumed == escape
    assert out == ""

    consumed, _ = dec.feed(data[escape:], out)
    assert consumed == len(data) - escape
    assert out == "日本abc"
