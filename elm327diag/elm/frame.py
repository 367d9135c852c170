from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING, Iterator, List, Optional, Sequence

from .errors import FrameReleaseError, ReceiveError

if TYPE_CHECKING:
    from .elm327 import ELM327


# Mode 01 reply: [0x41, PID, A, B, ...]
HEADER_LEN = 2


class ResponseFrame:
    """
    Raw response from the adapter: one ``bytes`` per message line.

    The frame owns its buffers until ``release()`` is called. Release happens
    exactly once; using the frame afterwards raises FrameReleaseError.
    """

    def __init__(self, messages: Sequence[bytes], *, command: Optional[str] = None):
        self._messages: List[bytes] = [bytes(m) for m in messages]
        self.command = command
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    @property
    def frame_count(self) -> int:
        self._check_live()
        return len(self._messages)

    @property
    def messages(self) -> List[bytes]:
        self._check_live()
        return list(self._messages)

    @property
    def data(self) -> bytes:
        """First message, the one the payload offsets refer to."""
        self._check_live()
        return self._messages[0] if self._messages else b""

    def header(self) -> bytes:
        return self.data[:HEADER_LEN]

    def payload_bytes(self) -> tuple[int, int]:
        """
        Bytes at offsets 2 and 3. A missing second byte (single-byte PIDs)
        reads as 0.
        """
        data = self.data
        if len(data) <= HEADER_LEN:
            raise ReceiveError("Response frame has no payload", command=self.command)
        a = data[HEADER_LEN]
        b = data[HEADER_LEN + 1] if len(data) > HEADER_LEN + 1 else 0
        return a, b

    def release(self) -> None:
        if self._released:
            raise FrameReleaseError("Response frame released twice", command=self.command)
        self._messages.clear()
        self._released = True

    def _check_live(self) -> None:
        if self._released:
            raise FrameReleaseError("Response frame used after release", command=self.command)

    def __enter__(self) -> "ResponseFrame":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if not self._released:
            self.release()

    def __repr__(self) -> str:
        if self._released:
            return "ResponseFrame(<released>)"
        shown = " | ".join(m.hex(" ").upper() for m in self._messages)
        return f"ResponseFrame({shown!r}, count={len(self._messages)})"


@contextmanager
def receiving(transport: "ELM327", ascii: bool = False) -> Iterator[ResponseFrame]:
    """
    Scoped receive: yields the next frame and releases it on exit, whatever
    happens inside the block. An absent frame raises ReceiveError.
    """
    frame = transport.receive(ascii=ascii)
    if frame is None:
        raise ReceiveError("No data returned", command=transport.last_command, lines=transport.last_lines)
    try:
        yield frame
    finally:
        if not frame.released:
            frame.release()


__all__ = ["HEADER_LEN", "ResponseFrame", "receiving"]
