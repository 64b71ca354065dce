from __future__ import annotations

# Text is held as UTF-8 so that a line feed is always the single byte 0x0A and
# never appears inside a multi-byte character. Lone surrogates produced by
# error handlers such as "surrogateescape" are carried through unchanged.
OUTPUT_ENCODING = "utf-8"
_ERRORS = "surrogatepass"


class TextBuffer:
    """Caller-owned accumulator for decoded text.

    Readers append to it instead of returning fresh strings so that text
    decoded before a failure stays visible to the caller. Lengths and offsets
    are UTF-8 byte counts, which is also what `read_to_end` and `read_line`
    report.
    """

    __slots__ = ("_data",)

    def __init__(self, text: str = ""):
        self._data = bytearray(text.encode(OUTPUT_ENCODING, _ERRORS))

    def append(self, text: str) -> None:
        if text:
            self._data += text.encode(OUTPUT_ENCODING, _ERRORS)

    def find(self, sub: bytes, start: int = 0) -> int:
        return self._data.find(sub, start)

    def split_off(self, at: int) -> str:
        """Remove everything from byte offset `at` onwards and return it as text."""

        tail = bytes(self._data[at:])
        del self._data[at:]
        return tail.decode(OUTPUT_ENCODING, _ERRORS)

    def clear(self) -> None:
        self._data.clear()

    def getvalue(self) -> str:
        return self._data.decode(OUTPUT_ENCODING, _ERRORS)

    def __len__(self) -> int:
        return len(self._data)

    def __str__(self) -> str:
        return self.getvalue()

    def __repr__(self) -> str:
        return f"TextBuffer({self.getvalue()!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TextBuffer):
            return self._data == other._data
        if isinstance(other, str):
            return self.getvalue() == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]
