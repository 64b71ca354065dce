from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO, Protocol

from .buffer import TextBuffer
from .codec import DecodeFailure, IncrementalCodecDecoder, RawDecoder
from .errors import INCOMPLETE_SEQUENCE, CodecError, ReaderError, ReaderIOError
from .traps import RecoveryPolicy, resolve_trap

log = logging.getLogger(__name__)

CHUNK_SIZE = 2048

# Must hold the longest sequence any codec keeps pending; CPython's CJK
# decoders buffer at most 8 bytes.
MIN_CHUNK_SIZE = 16


class ByteSource(Protocol):
    def read(self, size: int = -1, /) -> bytes | None: ...


class TextStreamReader:
    """Decode a byte source in a legacy (or any) encoding, chunk by chunk.

    Bytes are pulled `chunk_size` at a time, decoded incrementally, and handed
    out either all at once (`read_to_end`) or line by line (`read_line`,
    `lines`). A multi-byte character is never split between two results.

    Not thread-safe. Any bytes still buffered are lost when the reader is
    dropped or detached.
    """

    def __init__(
        self,
        source: ByteSource,
        encoding: str,
        trap: str | RecoveryPolicy = "strict",
        *,
        chunk_size: int = CHUNK_SIZE,
    ):
        self._init(source, IncrementalCodecDecoder(encoding), resolve_trap(trap), chunk_size)

    @classmethod
    def from_decoder(
        cls,
        source: ByteSource,
        decoder: RawDecoder,
        trap: str | RecoveryPolicy = "strict",
        *,
        chunk_size: int = CHUNK_SIZE,
    ) -> "TextStreamReader":
        reader = cls.__new__(cls)
        reader._init(source, decoder, resolve_trap(trap), chunk_size)
        return reader

    def _init(self, source: ByteSource, decoder: RawDecoder, trap: RecoveryPolicy, chunk_size: int) -> None:
        if chunk_size < MIN_CHUNK_SIZE:
            raise ValueError(f"chunk_size must be at least {MIN_CHUNK_SIZE}, got {chunk_size}")
        self._source: ByteSource | None = source
        self._decoder = decoder
        self._trap = trap
        self._chunk_size = chunk_size
        self._chunk = bytearray()

        # Text decoded past a line boundary, replayed by the next step.
        self._pending_text = ""
        self._pending_complete = True
        # Failure met while decoding text that was handed back early.
        self._pending_error: ReaderError | None = None

        self._bytes_read = 0
        self._bytes_consumed = 0

    def __repr__(self) -> str:
        return f"<TextStreamReader encoding={self.encoding!r} trap={self._trap!r}>"

    # Accessors. Reading from `source` or feeding `decoder` directly while the
    # reader is in use corrupts its state.

    @property
    def source(self) -> ByteSource:
        return self._checked_source()

    @property
    def decoder(self) -> RawDecoder:
        return self._decoder

    @property
    def trap(self) -> RecoveryPolicy:
        return self._trap

    @property
    def encoding(self) -> str | None:
        return getattr(self._decoder, "encoding", None)

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def bytes_read(self) -> int:
        return self._bytes_read

    @property
    def bytes_consumed(self) -> int:
        """Source bytes decoded or handed to the trap so far."""

        return self._bytes_consumed

    def detach(self) -> ByteSource:
        """Return the source and leave this reader unusable.

        Bytes already pulled into the chunk buffer and pending text are lost.
        """

        source = self._checked_source()
        self._source = None
        self._discard_buffers()
        return source

    def close(self) -> None:
        if self._source is None:
            return
        close = getattr(self._source, "close", None)
        self._source = None
        self._discard_buffers()
        if close is not None:
            close()

    def _discard_buffers(self) -> None:
        self._chunk.clear()
        self._pending_text = ""
        self._pending_complete = True
        self._pending_error = None

    def __enter__(self) -> "TextStreamReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _checked_source(self) -> ByteSource:
        if self._source is None:
            raise ValueError("underlying source has been detached or closed")
        return self._source

    def _progress_mark(self) -> tuple[int, int]:
        return self._bytes_read, self._bytes_consumed

    def _consume(self, n: int) -> None:
        if n <= 0:
            return
        if n >= len(self._chunk):
            self._chunk.clear()
        else:
            del self._chunk[:n]
        self._bytes_consumed += n

    def _fill(self, source: ByteSource) -> None:
        want = self._chunk_size - len(self._chunk)
        try:
            data = source.read(want)
        except (OSError, EOFError) as e:
            raise ReaderIOError(e) from e
        if data:
            self._chunk += data
            self._bytes_read += len(data)
        log.debug("read %d of %d requested byte(s)", len(data or b""), want)

    def _recover(self, failure: DecodeFailure, base: int, output: TextBuffer) -> None:
        span = failure.upto - base
        if span < 0 or span > len(self._chunk):
            raise ValueError(f"decoder reported a byte range outside its input: {failure!r}")
        offending = bytes(self._chunk[:span])
        handled = self._trap.handle(self._decoder, offending, output)
        self._consume(span)
        if not handled:
            raise CodecError(failure.cause, data=offending)

    def _step(self, output: TextBuffer) -> bool:
        """Run one incremental decode step, appending to `output`.

        Returns False when the decoder stopped inside a multi-byte character
        and needs more bytes, True otherwise.
        """

        source = self._checked_source()

        if self._pending_text:
            output.append(self._pending_text)
            complete = self._pending_complete
            self._pending_text = ""
            self._pending_complete = True
            return complete

        if self._pending_error is not None:
            err, self._pending_error = self._pending_error, None
            raise err

        if len(self._chunk) < self._chunk_size:
            self._fill(source)

        consumed, failure = self._decoder.feed(bytes(self._chunk), output)
        self._consume(consumed)
        if failure is not None:
            self._recover(failure, consumed, output)

        failure = self._decoder.finish(output)
        if failure is None:
            return True
        if failure.incomplete:
            return False
        self._recover(failure, 0, output)
        return True

    def read_to_end(self, output: TextBuffer) -> int:
        """Decode everything left in the source into `output`.

        Returns the number of UTF-8 bytes appended. Input ending inside a
        multi-byte character raises CodecError; text decoded before any
        failure stays in `output`.
        """

        start = len(output)
        while True:
            before = len(output)
            mark = self._progress_mark()
            try:
                complete = self._step(output)
            except ReaderIOError as e:
                if e.interrupted:
                    log.debug("read interrupted, retrying")
                    continue
                raise

            if len(output) == before and self._progress_mark() == mark:
                if complete:
                    return len(output) - start
                log.debug("source ended inside a multi-byte sequence: %r", bytes(self._chunk))
                raise CodecError(INCOMPLETE_SEQUENCE, data=bytes(self._chunk))

    def read_line(self, output: TextBuffer) -> int:
        """Decode up to and including the next line feed into `output`.

        At the end of the source whatever text is left is appended without a
        terminator. Returns the number of UTF-8 bytes appended; 0 means the
        source is exhausted.
        """

        start = len(output)
        while True:
            before = len(output)
            mark = self._progress_mark()
            error: ReaderError | None = None
            complete = True
            try:
                complete = self._step(output)
            except ReaderError as e:
                error = e

            nl = output.find(b"\n", before)
            if nl >= 0:
                end = nl + 1
                if end < len(output):
                    self._pending_text = output.split_off(end)
                    self._pending_complete = complete
                if error is not None and not (isinstance(error, ReaderIOError) and error.interrupted):
                    log.debug("deferring %r until the decoded line is consumed", error)
                    self._pending_error = error
                return end - start

            if error is not None:
                if isinstance(error, ReaderIOError):
                    if error.interrupted:
                        continue
                    if error.unexpected_eof:
                        return len(output) - start
                raise error

            if len(output) == before and self._progress_mark() == mark:
                return len(output) - start

    def read(self) -> str:
        buf = TextBuffer()
        self.read_to_end(buf)
        return buf.getvalue()

    def readline(self) -> str:
        buf = TextBuffer()
        self.read_line(buf)
        return buf.getvalue()

    def lines(self) -> "Lines":
        """Iterate over decoded lines without their "\\n" or "\\r\\n" terminator."""

        return Lines(self)


class Lines(Iterator[str]):
    """Forward-only iterator over the lines of a TextStreamReader.

    A ReaderError raised by `next()` does not end the iteration; calling
    `next()` again keeps reading after the failure.
    """

    def __init__(self, reader: TextStreamReader):
        self._reader = reader

    @property
    def reader(self) -> TextStreamReader:
        return self._reader

    def __iter__(self) -> "Lines":
        return self

    def __next__(self) -> str:
        buf = TextBuffer()
        self._reader.read_line(buf)
        if not len(buf):
            raise StopIteration
        line = buf.getvalue()
        if line.endswith("\n"):
            line = line[:-1]
            if line.endswith("\r"):
                line = line[:-1]
        return line


def open_text_stream(
    path: str | Path,
    encoding: str,
    trap: str | RecoveryPolicy = "strict",
    *,
    chunk_size: int = CHUNK_SIZE,
) -> TextStreamReader:
    """Open `path` in binary mode and wrap it in a TextStreamReader."""

    f: BinaryIO = open(path, "rb")
    try:
        return TextStreamReader(f, encoding, trap, chunk_size=chunk_size)
    except BaseException:
        f.close()
        raise
