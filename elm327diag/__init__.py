# elm327diag/__init__.py
from .elm import (
    ELM327,
    TrafficLog,
    ELMError,
    TransportOpenError,
    QueryError,
    SendError,
    ReceiveError,
    ResponseTimeoutError,
    FrameReleaseError,
    ResponseFrame,
    receiving,
)
from .pids import (
    DataType,
    Unit,
    Decoder,
    PidDescriptor,
    REGISTRY,
    lookup,
    decode_identity,
    decode_combined,
    enabled_descriptors,
)
from .obd2 import QueryEngine, QueryResult, ReportGenerator, exchange
from .config import DiagConfig

__all__ = [
    "ELM327",
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
    "DataType",
    "Unit",
    "Decoder",
    "PidDescriptor",
    "REGISTRY",
    "lookup",
    "decode_identity",
    "decode_combined",
    "enabled_descriptors",
    "QueryEngine",
    "QueryResult",
    "ReportGenerator",
    "exchange",
    "DiagConfig",
]
__version__ = "0.1.0"
