from __future__ import annotations

import re
from typing import List

HEXISH_RE = re.compile(r"^[0-9A-Fa-f ]+$")

# Status lines the adapter prints instead of (or before) data
NOISE_PREFIXES = (
    "SEARCHING",
    "BUS INIT",
    "UNABLE TO CONNECT",
    "STOPPED",
    "NO DATA",
    "CAN ERROR",
    "BUFFER FULL",
    "BUS BUSY",
    "BUS ERROR",
    "DATA ERROR",
)


def is_noise(line: str) -> bool:
    up = (line or "").strip().upper()
    if not up:
        return True

    if up == "OK" or up == "?":
        return True

    # version banner after ATZ
    if up.startswith("ELM327"):
        return True

    return any(up.startswith(p) for p in NOISE_PREFIXES)


def split_lines(text: str) -> List[str]:
    """Prompt-free, non-empty lines of a raw adapter reply."""
    text = (text or "").replace(">", "").replace("\r", "\n")
    return [ln.strip() for ln in text.split("\n") if ln.strip()]


def normalize_tokens(line: str) -> List[str]:
    """
    Uppercase hex tokens of one line. Lines sent with spaces off ("410C1A0F")
    are split into byte pairs.
    """
    if not line:
        return []
    clean = re.sub(r"[^0-9A-Fa-f ]", "", line)
    tokens = [t.upper() for t in clean.split() if t]
    if len(tokens) == 1 and len(tokens[0]) > 2 and len(tokens[0]) % 2 == 0:
        packed = tokens[0]
        tokens = [packed[i : i + 2] for i in range(0, len(packed), 2)]
    return tokens


def is_hexish_tokens(tokens: List[str]) -> bool:
    if not tokens:
        return False
    if any(len(t) != 2 for t in tokens):
        return False
    return bool(HEXISH_RE.match(" ".join(tokens)))


def line_to_bytes(line: str) -> bytes:
    """Hex line -> bytes; empty when the line is noise or not hex data."""
    if is_noise(line) or not HEXISH_RE.match(line.strip()):
        return b""
    tokens = normalize_tokens(line)
    if not is_hexish_tokens(tokens):
        return b""
    return bytes(int(t, 16) for t in tokens)


def lines_to_messages(lines: List[str]) -> List[bytes]:
    out: List[bytes] = []
    for ln in lines or []:
        data = line_to_bytes(ln)
        if data:
            out.append(data)
    return out
