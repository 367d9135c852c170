# elm327diag/elm/__init__.py
from .elm327 import ELM327, PROMPT, TrafficLog
from .errors import (
    ELMError,
    TransportOpenError,
    QueryError,
    SendError,
    ReceiveError,
    ResponseTimeoutError,
    FrameReleaseError,
)
from .frame import ResponseFrame, receiving

__all__ = [
    "ELM327",
    "PROMPT",
    "TrafficLog",
    "ELMError",
    "TransportOpenError",
    "QueryError",
    "SendError",
    "ReceiveError",
    "ResponseTimeoutError",
    "FrameReleaseError",
    "ResponseFrame",
    "receiving",
]
