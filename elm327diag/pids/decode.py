"""
PID decode strategies
=====================
Pure transforms from the two payload bytes (A, B) of a Mode 01 reply to a
physical value. No range clamping: a descriptor's min/max is metadata only.
"""

from enum import Enum


class Decoder(Enum):
    """Decode rule a descriptor refers to, by name."""
    IDENTITY = "identity"
    COMBINED = "combined"


def decode_identity(a: float, b: float = 0) -> float:
    """value = A"""
    return float(a)


def decode_combined(a: float, b: float) -> float:
    """value = (A*256 + B) / 4, e.g. engine speed in quarter rpm."""
    return ((a * 256) + b) / 4


_DECODERS = {
    Decoder.IDENTITY: decode_identity,
    Decoder.COMBINED: decode_combined,
}


def decode(decoder: Decoder, a: float, b: float = 0) -> float:
    return _DECODERS[decoder](a, b)
