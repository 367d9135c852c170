from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Mapping, TextIO, Union

from ..elm.errors import QueryError
from ..pids.registry import REGISTRY, PidDescriptor, for_each_enabled_descriptor
from .models import QueryResult
from .query import QueryEngine

logger = logging.getLogger(__name__)


def format_line(result: QueryResult) -> str:
    """Report line "<name>, <value>", value formatted like C printf("%f")."""
    return f"{result.name}, {result.value:f}\n"


class ReportGenerator:
    """
    One pass over the enabled descriptors.

    stop_on_error:
      - True (default): the first QueryError propagates; later descriptors
        are not queried
      - False: the failing descriptor is logged and skipped
    """

    def __init__(self, engine: QueryEngine, registry: Mapping[int, PidDescriptor] = REGISTRY):
        self.engine = engine
        self.registry = registry

    def for_each_enabled_descriptor(self, fn: Callable[[PidDescriptor], None]) -> None:
        for_each_enabled_descriptor(fn, self.registry)

    def collect(self, *, stop_on_error: bool = True) -> List[QueryResult]:
        results: List[QueryResult] = []
        self.write_to(results.append, stop_on_error=stop_on_error)
        return results

    def write(self, out: TextIO, *, stop_on_error: bool = True) -> int:
        """Writes one line per successful query; returns the line count."""
        count = 0

        def _emit(result: QueryResult) -> None:
            nonlocal count
            out.write(format_line(result))
            count += 1

        self.write_to(_emit, stop_on_error=stop_on_error)
        return count

    def write_to(self, sink: Callable[[QueryResult], None], *, stop_on_error: bool = True) -> None:
        def _visit(descriptor: PidDescriptor) -> None:
            try:
                result = self.engine.query_descriptor(descriptor)
            except QueryError as e:
                if stop_on_error:
                    logger.error(f"Query for {descriptor.name} (PID {descriptor.pid}) failed, aborting pass: {e}")
                    raise
                logger.warning(f"Skipping {descriptor.name} (PID {descriptor.pid}): {e}")
                return
            sink(result)

        self.for_each_enabled_descriptor(_visit)

    def run(self, path: Union[str, Path], *, stop_on_error: bool = True) -> int:
        target = Path(path)
        with target.open("w", encoding="utf-8") as out:
            return self.write(out, stop_on_error=stop_on_error)


__all__ = ["format_line", "ReportGenerator"]
