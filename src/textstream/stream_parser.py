from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from .buffer import TextBuffer
from .errors import CodecError
from .reader import TextStreamReader


@dataclass(frozen=True)
class DecodedLine:
    number: int
    text: str | None
    error: str | None


def _skip_rest_of_line(reader: TextStreamReader) -> None:
    buf = TextBuffer()
    while True:
        buf.clear()
        try:
            n = reader.read_line(buf)
        except CodecError:
            continue
        if n == 0 or buf.getvalue().endswith("\n"):
            return


def iter_decoded_lines(reader: TextStreamReader) -> Iterator[DecodedLine]:
    """Iterate decoded lines, turning decode failures into error entries.

    A line that hits undecodable bytes is reported with `error` set and the
    rest of that line is skipped, so line numbers keep matching the input.
    I/O failures still propagate.
    """

    lines = reader.lines()
    number = 0
    while True:
        number += 1
        try:
            text = next(lines)
        except StopIteration:
            return
        except CodecError as e:
            yield DecodedLine(number=number, text=None, error=f"codec_error: {e}")
            _skip_rest_of_line(reader)
            continue
        yield DecodedLine(number=number, text=text, error=None)
