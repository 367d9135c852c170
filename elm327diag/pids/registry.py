"""
OBD-II Mode 01 PID registry
===========================
Descriptors for the PIDs this tool reads, keyed by command code.
Built once at import; read-only afterwards.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

from .decode import Decoder, decode


class DataType(Enum):
    INTEGER = 0
    REAL = 1


class Unit(Enum):
    PERCENT = "%"
    RPM = "rpm"
    CELSIUS = "degC"
    PASCAL = "kPa"
    KM_PER_HOUR = "km/h"


@dataclass(frozen=True)
class PidDescriptor:
    """Represents one Mode 01 Parameter ID."""
    code: int
    name: str
    datatype: DataType
    response_length: int
    min_value: float
    max_value: float
    unit: Unit
    decoder: Decoder

    @property
    def pid(self) -> str:
        return f"{self.code:02X}"

    def decode(self, a: float, b: float = 0) -> float:
        return decode(self.decoder, a, b)


def _build(descriptors: List[PidDescriptor]) -> Mapping[int, PidDescriptor]:
    table = {d.code: d for d in sorted(descriptors, key=lambda d: d.code)}
    return MappingProxyType(table)


# PID 0x03 (fuel system status) is bit-encoded, with no unit or range: not registered.
REGISTRY: Mapping[int, PidDescriptor] = _build([
    # 04 Calculated engine load, 0 | 100 %
    PidDescriptor(
        code=0x04,
        name="Calculated Engine Load",
        datatype=DataType.INTEGER,
        response_length=1,
        min_value=0,
        max_value=100,
        unit=Unit.PERCENT,
        decoder=Decoder.IDENTITY,
    ),
    # 05 Engine coolant temperature, -40 | 215 degC
    PidDescriptor(
        code=0x05,
        name="Engine Coolant Temperature",
        datatype=DataType.INTEGER,
        response_length=1,
        min_value=-40,
        max_value=215,
        unit=Unit.CELSIUS,
        decoder=Decoder.IDENTITY,
    ),
    # 0A Fuel pressure (gauge), 0 | 765 kPa
    PidDescriptor(
        code=0x0A,
        name="Fuel Gauge Pressure",
        datatype=DataType.INTEGER,
        response_length=1,
        min_value=0,
        max_value=765,
        unit=Unit.PASCAL,
        decoder=Decoder.IDENTITY,
    ),
    # 0B Intake manifold absolute pressure, 0 | 255 kPa
    PidDescriptor(
        code=0x0B,
        name="Intake Manifold Absolute Pressure",
        datatype=DataType.INTEGER,
        response_length=1,
        min_value=0,
        max_value=255,
        unit=Unit.PASCAL,
        decoder=Decoder.IDENTITY,
    ),
    # 0C Engine speed, 0 | 16383.75 rpm
    PidDescriptor(
        code=0x0C,
        name="Engine Speed",
        datatype=DataType.REAL,
        response_length=2,
        min_value=0,
        max_value=16383.75,
        unit=Unit.RPM,
        decoder=Decoder.COMBINED,
    ),
    # 0D Vehicle speed, 0 | 255 km/h
    PidDescriptor(
        code=0x0D,
        name="Vehicle Speed",
        datatype=DataType.INTEGER,
        response_length=1,
        min_value=0,
        max_value=255,
        unit=Unit.KM_PER_HOUR,
        decoder=Decoder.IDENTITY,
    ),
])


def lookup(code: int, registry: Mapping[int, PidDescriptor] = REGISTRY) -> PidDescriptor:
    """Descriptor for a command code. Raises KeyError when not registered."""
    return registry[code]


def get_pid_info(code: int, registry: Mapping[int, PidDescriptor] = REGISTRY) -> Optional[PidDescriptor]:
    return registry.get(code)


def list_available_pids(registry: Mapping[int, PidDescriptor] = REGISTRY) -> List[int]:
    return list(registry.keys())


def enabled_descriptors(registry: Mapping[int, PidDescriptor] = REGISTRY) -> List[PidDescriptor]:
    return [d for d in registry.values() if d.response_length > 0]


def for_each_enabled_descriptor(
    fn: Callable[[PidDescriptor], Any],
    registry: Mapping[int, PidDescriptor] = REGISTRY,
) -> None:
    for descriptor in enabled_descriptors(registry):
        fn(descriptor)


def in_range(descriptor: PidDescriptor, value: float) -> bool:
    """Advisory check against the descriptor's declared range."""
    return descriptor.min_value <= value <= descriptor.max_value


def descriptor_to_dict(descriptor: PidDescriptor) -> Dict[str, Any]:
    return {
        "code": descriptor.code,
        "pid": descriptor.pid,
        "name": descriptor.name,
        "datatype": descriptor.datatype.name,
        "response_length": descriptor.response_length,
        "min_value": descriptor.min_value,
        "max_value": descriptor.max_value,
        "unit": descriptor.unit.value,
        "decoder": descriptor.decoder.value,
    }


def registry_to_dict(registry: Mapping[int, PidDescriptor] = REGISTRY) -> Dict[str, Dict[str, Any]]:
    return {d.pid: descriptor_to_dict(d) for d in registry.values()}
