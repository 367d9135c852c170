from __future__ import annotations

OBD_MODE_1 = 0x01

# The adapter executes a command on carriage return
TERMINATOR = "\r"


def format_command(mode: int, pid: int) -> str:
    """Textual OBD command, e.g. (1, 0x0C) -> "010C"."""
    if not 0 <= mode <= 0xFF or not 0 <= pid <= 0xFF:
        raise ValueError(f"mode/pid out of byte range: {mode!r}/{pid!r}")
    return f"{mode:02X}{pid:02X}"


def build_request(mode: int, pid: int) -> bytes:
    return f"{format_command(mode, pid)}{TERMINATOR}".encode("ascii")


def response_header(mode: int, pid: int) -> bytes:
    """Header a positive reply starts with: [0x40 | mode, pid]."""
    return bytes([0x40 | mode, pid])
