from __future__ import annotations

import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Union

import serial

from .errors import ELMError, ReceiveError, ResponseTimeoutError, SendError, TransportOpenError
from .frame import ResponseFrame
from .init import initialize_elm
from ..protocol import is_noise, lines_to_messages, split_lines

logger = logging.getLogger(__name__)

PROMPT = b">"


class TrafficLog:
    """
    Appends adapter traffic to a text file, one line per event:

        2026-10-16T09:30:01.250 TX 010D
        2026-10-16T09:30:01.310 RX 010D: 41 0D 64

    Pass an instance as ``ELM327(raw_logger=...)``.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def __call__(self, direction: str, command: str, lines: List[str]) -> None:
        stamp = datetime.now().isoformat(timespec="milliseconds")
        entry = f"{stamp} {direction} {command}"
        if direction == "RX":
            entry += ": " + (" | ".join(lines) if lines else "<no lines>")
        with self.path.open("a", encoding="utf-8") as f:
            f.write(entry + "\n")


class ELM327:
    """
    Byte-stream endpoint for an ELM327 adapter on a serial device.

    One instance owns one serial handle. Requests are strictly
    send -> receive -> flush; callers serialise access (see QueryEngine).
    """

    DEFAULT_BAUDRATE = 38400
    DEFAULT_TIMEOUT_MS = 3000
    POLL_INTERVAL_S = 0.01

    def __init__(
        self,
        port: str,
        baudrate: int = DEFAULT_BAUDRATE,
        timeout: float = DEFAULT_TIMEOUT_MS / 1000,
        raw_logger: Optional[Callable[[str, str, List[str]], None]] = None,
    ):
        self.port = port
        self.baudrate = baudrate
        self.timeout = timeout
        self.connection: Optional[serial.Serial] = None
        self.elm_version: Optional[str] = None

        self.raw_logger = raw_logger
        self.last_command: Optional[str] = None
        self.last_lines: List[str] = []
        self.last_duration_s: Optional[float] = None

        # bytes that arrived after the prompt; dropped by flush()
        self._residual = bytearray()

    @property
    def is_open(self) -> bool:
        if not self.connection:
            return False
        try:
            return bool(self.connection.is_open)
        except (OSError, serial.SerialException):
            return False

    # -----------------------------
    # Lifecycle
    # -----------------------------
    def open(self) -> "ELM327":
        try:
            self.connection = serial.Serial(
                port=self.port,
                baudrate=self.baudrate,
                timeout=self.timeout,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
            )
        except (OSError, ValueError, serial.SerialException) as e:
            self.connection = None
            raise TransportOpenError(f"Cannot open {self.port}: {e}") from e

        time.sleep(0.2)
        try:
            initialize_elm(self)
        except ELMError as e:
            self.close()
            raise TransportOpenError(f"ELM327 initialization failed on {self.port}: {e}") from e

        logger.info(f"Opened {self.port} ({self.elm_version or 'unknown adapter'})")
        return self

    def set_timeout(self, milliseconds: int) -> None:
        if milliseconds <= 0:
            raise ValueError(f"timeout must be positive, got {milliseconds}")
        self.timeout = milliseconds / 1000

    def close(self) -> None:
        if self.connection is None:
            return
        try:
            self.connection.close()
        except (OSError, serial.SerialException) as e:
            logger.warning(f"Error closing {self.port}: {e}")
        finally:
            self.connection = None
            self._residual.clear()

    def __enter__(self) -> "ELM327":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    # -----------------------------
    # Byte exchange
    # -----------------------------
    def send(self, data: bytes) -> None:
        command = data.decode("ascii", errors="ignore").strip()
        if not self.is_open:
            raise SendError("Serial port is not open", command=command)

        self.last_command = command
        if self.raw_logger:
            self.raw_logger("TX", command, [])
        logger.debug(f"TX {command!r}")

        try:
            written = self.connection.write(data)
            self.connection.flush()
        except (OSError, serial.SerialException) as e:
            raise SendError(f"Write failed: {e}", command=command) from e

        if written is not None and written != len(data):
            raise SendError(f"Short write: {written}/{len(data)} bytes", command=command)

    def receive(self, ascii: bool = False, timeout: Optional[float] = None) -> Optional[ResponseFrame]:
        """
        Wait for the next prompt-terminated reply, up to ``timeout`` seconds
        (the connection timeout when None).

        Returns None when the reply carries no data (NO DATA, '?', banners).
        Raises ResponseTimeoutError when no prompt arrives in time.
        """
        lines = self._read_until_prompt(self.timeout if timeout is None else timeout)
        if lines and self.last_command and lines[0].replace(" ", "").upper() == self.last_command.upper():
            lines = lines[1:]  # echo

        if ascii:
            messages = [ln.encode("ascii", errors="ignore") for ln in lines if not is_noise(ln)]
        else:
            messages = lines_to_messages(lines)

        if not messages:
            logger.debug(f"RX {self.last_command!r}: no data {lines}")
            return None
        return ResponseFrame(messages, command=self.last_command)

    def flush(self) -> None:
        self._residual.clear()
        if not self.is_open:
            return
        try:
            self.connection.reset_input_buffer()
        except (OSError, serial.SerialException) as e:
            logger.warning(f"Flush failed on {self.port}: {e}")

    def send_raw_lines(self, command: str, timeout: Optional[float] = None) -> List[str]:
        """AT-style helper: send one command and return the reply lines."""
        self.flush()
        self.send(f"{command}\r".encode("ascii", errors="ignore"))
        return self._read_until_prompt(self.timeout if timeout is None else timeout)

    def _read_until_prompt(self, timeout: float) -> List[str]:
        buf = bytearray(self._residual)
        self._residual.clear()
        start = time.monotonic()

        try:
            while PROMPT not in buf:
                if (time.monotonic() - start) > timeout:
                    self.last_duration_s = time.monotonic() - start
                    self.last_lines = []
                    logger.debug(f"RX {self.last_command!r}: timeout, dropping {bytes(buf)!r}")
                    buf.clear()
                    raise ResponseTimeoutError(
                        f"No response within {int(timeout * 1000)} ms",
                        command=self.last_command,
                    )
                if not self.is_open:
                    raise ReceiveError("Serial port closed while reading", command=self.last_command)
                n = self.connection.in_waiting
                if n:
                    buf.extend(self.connection.read(n))
                else:
                    time.sleep(self.POLL_INTERVAL_S)
        except ELMError:
            raise
        except (OSError, serial.SerialException) as e:
            buf.clear()
            raise ReceiveError(f"Read failed: {e}", command=self.last_command) from e

        idx = buf.index(PROMPT)
        self._residual.extend(buf[idx + 1 :])
        text = buf[:idx].decode("ascii", errors="ignore")

        lines = split_lines(text)
        self.last_lines = lines
        self.last_duration_s = time.monotonic() - start
        if self.raw_logger:
            self.raw_logger("RX", self.last_command or "", lines)
        logger.debug(f"RX {self.last_command!r}: {lines}")
        return lines


__all__ = ["ELM327", "PROMPT", "TrafficLog"]
