# elm327diag/elm/init.py
from __future__ import annotations

import re
from typing import TYPE_CHECKING, Optional

from .errors import TransportOpenError

if TYPE_CHECKING:
    from .elm327 import ELM327


# (command, timeout_s); ATZ needs longer while the adapter reboots
INIT_SEQUENCE = (
    ("ATZ", 2.0),  # reset
    ("ATE0", 1.0),  # echo off
    ("ATL0", 1.0),  # linefeeds off
    ("ATS1", 1.0),  # spaces on, the parser tokenizes by spaces
    ("ATH0", 1.0),  # headers off: replies start at the mode byte
    ("ATSP0", 1.0),  # protocol auto
)


def extract_version(response: str) -> Optional[str]:
    s = (response or "").strip()
    if not s:
        return None
    m = re.search(r"(ELM327\s*v?\s*[\w\.]+)", s, re.IGNORECASE)
    if m:
        return m.group(1).strip()
    return s[:40].strip() if s else None


def initialize_elm(elm: "ELM327") -> None:
    """
    Puts the adapter into a known state. Raises TransportOpenError when a
    step gets no reply or an error reply.
    """
    for command, timeout in INIT_SEQUENCE:
        lines = elm.send_raw_lines(command, timeout=timeout)
        joined = " ".join(lines).upper()
        if command == "ATZ":
            elm.elm_version = extract_version("\n".join(lines)) or "unknown"
            continue
        if "?" in joined or "ERROR" in joined:
            raise TransportOpenError(f"Adapter rejected {command}", command=command, lines=lines)
