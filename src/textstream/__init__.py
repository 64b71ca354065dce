"""Incremental decoding of byte streams in any text encoding."""

from .buffer import TextBuffer
from .codec import DecodeFailure, IncrementalCodecDecoder, RawDecoder, lookup_text_codec
from .errors import INCOMPLETE_SEQUENCE, CodecError, ReaderError, ReaderIOError
from .reader import CHUNK_SIZE, ByteSource, Lines, TextStreamReader, open_text_stream
from .traps import (
    CallTrap,
    ErrorHandlerTrap,
    IgnoreTrap,
    RecoveryPolicy,
    ReplaceTrap,
    StrictTrap,
    resolve_trap,
)

__all__ = [
    "CHUNK_SIZE",
    "INCOMPLETE_SEQUENCE",
    "ByteSource",
    "CallTrap",
    "CodecError",
    "DecodeFailure",
    "ErrorHandlerTrap",
    "IgnoreTrap",
    "IncrementalCodecDecoder",
    "Lines",
    "RawDecoder",
    "ReaderError",
    "ReaderIOError",
    "RecoveryPolicy",
    "ReplaceTrap",
    "StrictTrap",
    "TextBuffer",
    "TextStreamReader",
    "lookup_text_codec",
    "open_text_stream",
    "resolve_trap",
]
