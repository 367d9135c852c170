# elm327diag/protocol/__init__.py
from .normalize import (
    is_noise,
    split_lines,
    normalize_tokens,
    is_hexish_tokens,
    line_to_bytes,
    lines_to_messages,
)
from .request import OBD_MODE_1, TERMINATOR, format_command, build_request, response_header

__all__ = [
    "is_noise",
    "split_lines",
    "normalize_tokens",
    "is_hexish_tokens",
    "line_to_bytes",
    "lines_to_messages",
    "OBD_MODE_1",
    "TERMINATOR",
    "format_command",
    "build_request",
    "response_header",
]
