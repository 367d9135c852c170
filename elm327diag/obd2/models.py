from __future__ import annotations

from dataclasses import dataclass

from ..pids.registry import PidDescriptor


@dataclass(frozen=True)
class QueryResult:
    descriptor: PidDescriptor
    value: float

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def unit(self) -> str:
        return self.descriptor.unit.value
