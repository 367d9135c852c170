# elm327diag/pids/__init__.py
from .decode import Decoder, decode, decode_identity, decode_combined
from .registry import (
    DataType,
    Unit,
    PidDescriptor,
    REGISTRY,
    lookup,
    get_pid_info,
    list_available_pids,
    enabled_descriptors,
    for_each_enabled_descriptor,
    in_range,
    descriptor_to_dict,
    registry_to_dict,
)

__all__ = [
    "Decoder",
    "decode",
    "decode_identity",
    "decode_combined",
    "DataType",
    "Unit",
    "PidDescriptor",
    "REGISTRY",
    "lookup",
    "get_pid_info",
    "list_available_pids",
    "enabled_descriptors",
    "for_each_enabled_descriptor",
    "in_range",
    "descriptor_to_dict",
    "registry_to_dict",
]
