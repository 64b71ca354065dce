from __future__ import annotations

# Cause reported by a decoder whose remaining bytes are a valid but truncated
# prefix of a multi-byte character.
INCOMPLETE_SEQUENCE = "incomplete sequence"


class ReaderError(Exception):
    """Base class for failures raised while decoding a byte stream."""


class ReaderIOError(ReaderError):
    """The byte source failed. The original exception is kept in `error`."""

    def __init__(self, error: BaseException):
        super().__init__(f"byte source failed: {error!r}")
        self.error = error

    @property
    def interrupted(self) -> bool:
        return isinstance(self.error, InterruptedError)

    @property
    def unexpected_eof(self) -> bool:
        return isinstance(self.error, EOFError)


class CodecError(ReaderError):
    """The decoder met bytes it could not interpret and the trap declined them."""

    def __init__(self, cause: str, *, data: bytes = b""):
        msg = cause if not data else f"{cause}: {data!r}"
        super().__init__(msg)
        self.cause = cause
        self.data = data

    @property
    def incomplete(self) -> bool:
        return self.cause == INCOMPLETE_SEQUENCE
