from __future__ import annotations

import codecs
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from .buffer import TextBuffer
from .codec import RawDecoder

log = logging.getLogger(__name__)

REPLACEMENT_CHARACTER = "\ufffd"


class RecoveryPolicy(Protocol):
    def handle(self, decoder: RawDecoder, data: bytes, output: TextBuffer) -> bool:
        """Deal with an undecodable byte range.

        Return True after optionally appending substitute text to `output`;
        return False to make the reader fail with a CodecError.
        """


class StrictTrap:
    def handle(self, decoder: RawDecoder, data: bytes, output: TextBuffer) -> bool:
        return False

    def __repr__(self) -> str:
        return "StrictTrap()"


class ReplaceTrap:
    def handle(self, decoder: RawDecoder, data: bytes, output: TextBuffer) -> bool:
        log.debug("replacing invalid sequence %r", data)
        output.append(REPLACEMENT_CHARACTER)
        return True

    def __repr__(self) -> str:
        return "ReplaceTrap()"


class IgnoreTrap:
    def handle(self, decoder: RawDecoder, data: bytes, output: TextBuffer) -> bool:
        log.debug("skipping invalid sequence %r", data)
        return True

    def __repr__(self) -> str:
        return "IgnoreTrap()"


@dataclass(frozen=True)
class CallTrap:
    """Delegate to `func(decoder, data)`; a `None` result declines."""

    func: Callable[[RawDecoder, bytes], str | None]

    def handle(self, decoder: RawDecoder, data: bytes, output: TextBuffer) -> bool:
        text = self.func(decoder, data)
        if text is None:
            return False
        output.append(text)
        return True


class ErrorHandlerTrap:
    """Use an error handler registered with `codecs.register_error`.

    The whole offending range is consumed whatever position the handler asks
    to resume at.
    """

    def __init__(self, name: str):
        self.name = name
        self._handler = codecs.lookup_error(name)

    def handle(self, decoder: RawDecoder, data: bytes, output: TextBuffer) -> bool:
        encoding = getattr(decoder, "encoding", "unknown")
        exc = UnicodeDecodeError(encoding, data, 0, len(data), "invalid sequence")
        try:
            replacement, _ = self._handler(exc)
        except UnicodeDecodeError:
            return False
        log.debug("%s handler turned %r into %r", self.name, data, replacement)
        output.append(replacement)
        return True

    def __repr__(self) -> str:
        return f"ErrorHandlerTrap({self.name!r})"


_BUILTIN_TRAPS: dict[str, RecoveryPolicy] = {
    "strict": StrictTrap(),
    "replace": ReplaceTrap(),
    "ignore": IgnoreTrap(),
}


def resolve_trap(trap: str | RecoveryPolicy) -> RecoveryPolicy:
    """Map a trap name to a policy; policy objects are returned as is.

    Unknown names raise LookupError, like `codecs.lookup_error`.
    """

    if not isinstance(trap, str):
        return trap
    builtin = _BUILTIN_TRAPS.get(trap)
    if builtin is not None:
        return builtin
    return ErrorHandlerTrap(trap)
