from __future__ import annotations

import logging
import threading
import time
from typing import TYPE_CHECKING, Mapping

from ..elm.errors import ReceiveError
from ..elm.frame import HEADER_LEN, ResponseFrame
from ..pids.registry import REGISTRY, PidDescriptor, lookup
from ..protocol import OBD_MODE_1, build_request, response_header
from .models import QueryResult

if TYPE_CHECKING:
    from ..elm.elm327 import ELM327

logger = logging.getLogger(__name__)


def _is_late_reply(frame: ResponseFrame, mode: int, pid: int) -> bool:
    # positive reply for this mode but another PID
    header = frame.header()
    return len(header) == HEADER_LEN and header[0] == response_header(mode, pid)[0] and header[1] != pid


def exchange(transport: "ELM327", mode: int, pid: int, ascii: bool = False) -> ResponseFrame:
    """
    One flush -> send -> receive -> flush cycle. The caller owns (and must
    release) the returned frame.

    Input left over from an earlier request is dropped before sending. A late
    reply to another PID that still lands ahead of ours is released and
    skipped while the timeout allows.

    Raises SendError, ReceiveError (absent reply) or ResponseTimeoutError.
    """
    transport.flush()
    transport.send(build_request(mode, pid))

    deadline = time.monotonic() + transport.timeout
    while True:
        frame = transport.receive(ascii=ascii, timeout=max(deadline - time.monotonic(), 0.0))
        if frame is None:
            raise ReceiveError("No data returned", command=transport.last_command, lines=transport.last_lines)
        if ascii or not _is_late_reply(frame, mode, pid):
            break
        logger.warning(f"Dropping late reply {frame.header().hex().upper()} while waiting for PID {pid:02X}")
        frame.release()

    try:
        transport.flush()
    except Exception:
        frame.release()
        raise
    return frame


class QueryEngine:
    """
    Reads registered PIDs over one transport.

    Transport access is serialised: one request in flight at a time, in
    program order.
    """

    def __init__(
        self,
        transport: "ELM327",
        registry: Mapping[int, PidDescriptor] = REGISTRY,
        mode: int = OBD_MODE_1,
    ):
        self.transport = transport
        self.registry = registry
        self.mode = mode
        self._lock = threading.Lock()

    def query(self, code: int) -> QueryResult:
        descriptor = lookup(code, self.registry)
        return self.query_descriptor(descriptor)

    def query_descriptor(self, descriptor: PidDescriptor) -> QueryResult:
        if descriptor.response_length <= 0:
            raise ValueError(f"PID {descriptor.pid} is disabled")

        with self._lock:
            with exchange(self.transport, self.mode, descriptor.code) as frame:
                a, b = self._extract_payload(frame, descriptor)

        value = descriptor.decode(a, b)
        logger.debug(f"{descriptor.name} = {value} {descriptor.unit.value}")
        return QueryResult(descriptor=descriptor, value=value)

    def _extract_payload(self, frame: ResponseFrame, descriptor: PidDescriptor) -> tuple[int, int]:
        expected = response_header(self.mode, descriptor.code)
        header = frame.header()
        if header != expected:
            raise ReceiveError(
                f"Unexpected reply header {header.hex().upper() or '<empty>'}, "
                f"expected {expected.hex().upper()}",
                command=frame.command,
            )
        if len(frame.data) < HEADER_LEN + descriptor.response_length:
            raise ReceiveError(
                f"Short reply for PID {descriptor.pid}: "
                f"{len(frame.data) - HEADER_LEN}/{descriptor.response_length} data bytes",
                command=frame.command,
            )
        return frame.payload_bytes()


__all__ = ["exchange", "QueryEngine"]
