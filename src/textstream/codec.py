from __future__ import annotations

import codecs
import logging
from dataclasses import dataclass
from typing import Protocol

from .buffer import TextBuffer
from .errors import INCOMPLETE_SEQUENCE

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecodeFailure:
    """A decoder's report about bytes it could not turn into text.

    `upto` is the end (exclusive) of the offending range. For `feed` it is an
    offset into the bytes that were fed; for `finish` it is relative to the
    first byte `feed` left unconsumed.
    """

    cause: str
    upto: int

    @property
    def incomplete(self) -> bool:
        return self.cause == INCOMPLETE_SEQUENCE


class RawDecoder(Protocol):
    def feed(self, data: bytes, output: TextBuffer) -> tuple[int, DecodeFailure | None]:
        """Decode `data` into `output`.

        Returns how many leading bytes were fully consumed and, when an invalid
        sequence was met, the failure describing `data[consumed:upto]`.
        """

    def finish(self, output: TextBuffer) -> DecodeFailure | None:
        """Finalize against leftover state; `INCOMPLETE_SEQUENCE` means "need more bytes"."""


def lookup_text_codec(encoding: str) -> codecs.CodecInfo:
    """Resolve an encoding label through Python's codec registry.

    Raises LookupError for unknown labels and for bytes-to-bytes codecs such
    as base64 or rot13.
    """

    info = codecs.lookup(encoding)
    if not getattr(info, "_is_text_encoding", True):
        raise LookupError(f"{encoding!r} is not a text encoding")
    return info


class IncrementalCodecDecoder:
    """`RawDecoder` on top of a Python incremental decoder.

    Python decoders keep an incomplete trailing sequence in their own buffer.
    Here those bytes are reported as unconsumed instead, so they stay in the
    reader's chunk buffer and are fed again once more bytes arrive. Every feed
    restarts from the last character boundary with the shift state recorded
    there, which keeps stateful codecs (ISO-2022-JP, UTF-16 BOM detection)
    correct across chunks.
    """

    def __init__(self, encoding: str):
        info = lookup_text_codec(encoding)
        self.encoding = info.name
        self._decoder = info.incrementaldecoder("strict")
        self._pending, self._flag = self._decoder.getstate()

    def _rewind(self) -> None:
        self._decoder.setstate((b"", self._flag))

    def feed(self, data: bytes, output: TextBuffer) -> tuple[int, DecodeFailure | None]:
        self._rewind()
        try:
            text = self._decoder.decode(data, final=False)
        except UnicodeDecodeError as e:
            self._rewind()
            output.append(self._decoder.decode(data[: e.start], final=False))
            self._pending, self._flag = self._decoder.getstate()
            return e.start, DecodeFailure(cause=e.reason, upto=e.end)

        output.append(text)
        self._pending, self._flag = self._decoder.getstate()
        return len(data) - len(self._pending), None

    def finish(self, output: TextBuffer) -> DecodeFailure | None:
        if not self._pending:
            return None
        log.debug("%s: %d byte(s) of an incomplete sequence pending", self.encoding, len(self._pending))
        self._pending = b""
        return DecodeFailure(cause=INCOMPLETE_SEQUENCE, upto=0)
