from __future__ import annotations

from textstream.buffer import TextBuffer


def test_length_counts_utf8_bytes() -> None:
    buf = TextBuffer("あ")
    buf.append("a\n")

    assert len(buf) == 5
    assert buf.getvalue() == "あa\n"
    assert buf.find(b"\n") == 4


def test_split_off_returns_tail_text() -> None:
    buf = TextBuffer("あいう\nえお")
    tail = buf.split_off(10)

    assert tail == "えお"
    assert buf == "あいう\n"
    assert str(buf) == "あいう\n"


def test_surrogates_survive() -> None:
    buf = TextBuffer()
    buf.append("a\udcffb")

    assert buf.getvalue() == "a\udcffb"
    assert buf.find(b"\n") == -1


def test_clear() -> None:
    buf = TextBuffer("abcdef")
    buf.clear()
    assert len(buf) == 0
    assert buf == ""
