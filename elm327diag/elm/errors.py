from __future__ import annotations

from typing import List, Optional


class ELMError(Exception):
    """
    Base exception for the ELM327 adapter layer.
    Carries the command and the response lines involved, for debugging.
    """

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        lines: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.command = command
        self.lines = lines

    def __str__(self) -> str:
        base = super().__str__()
        extra = []
        if self.command:
            extra.append(f"cmd={self.command}")
        if self.lines:
            extra.append(f"lines={self.lines[:3]}")
        if extra:
            base += " [" + " | ".join(extra) + "]"
        return base


class TransportOpenError(ELMError):
    """Serial device could not be opened or the adapter did not initialise."""


class QueryError(ELMError):
    """A single request/response cycle failed."""


class SendError(QueryError):
    """Request write failed or was short."""


class ReceiveError(QueryError):
    """No usable response frame came back."""


class ResponseTimeoutError(QueryError, TimeoutError):
    """No complete response before the configured timeout."""


class FrameReleaseError(ELMError):
    """Response frame used after release, or released twice."""


__all__ = [
    "ELMError",
    "TransportOpenError",
    "QueryError",
    "SendError",
    "ReceiveError",
    "ResponseTimeoutError",
    "FrameReleaseError",
]
