from __future__ import annotations

# "あいうえお" in Shift_JIS.
SJIS_AIUEO = bytes([0x82, 0xA0, 0x82, 0xA2, 0x82, 0xA4, 0x82, 0xA6, 0x82, 0xA8])


class TrickleSource:
    """Byte source handing out at most `step` bytes per read."""

    def __init__(self, data: bytes, step: int = 1):
        self._data = data
        self._pos = 0
        self._step = step
        self.reads = 0

    def read(self, size: int = -1) -> bytes:
        self.reads += 1
        n = self._step if size < 0 else min(size, self._step)
        chunk = self._data[self._pos : self._pos + n]
        self._pos += len(chunk)
        return chunk


class ScriptedSource:
    """Byte source replaying chunks and exceptions in order, then EOF."""

    def __init__(self, *items: bytes | BaseException):
        self._items = list(items)

    def read(self, size: int = -1) -> bytes:
        if not self._items:
            return b""
        item = self._items.pop(0)
        if isinstance(item, BaseException):
            raise item
        assert len(item) <= size
        return item

