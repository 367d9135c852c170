from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, List, Optional

from elm327diag.config import DEFAULT_DEVICE_NAME, DEFAULT_OUTPUT_FILE, DiagConfig, load_env_file, log_level
from elm327diag.elm import ELM327, QueryError, TrafficLog, TransportOpenError
from elm327diag.obd2 import QueryEngine, ReportGenerator

logger = logging.getLogger("elm327diag_cli")

PROG = "elm327diag"


class UsageError(Exception):
    pass


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str):
        raise UsageError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(prog=PROG, add_help=False)
    parser.add_argument("-d", dest="device", metavar="<string>")
    parser.add_argument("-f", dest="output_file", metavar="<string>")
    parser.add_argument("-o", dest="dummy", action="store_true")
    return parser


def print_usage(prog: str = PROG) -> None:
    print("-------- elm327diag - Diagnostics Utility for ELM327 Devices --------")
    print("Description:")
    print("  This program is for interfacing with ELM327 serial devices which can ")
    print("  read diagnostic data through a vehicle's ODBII port.")
    print("Usage:")
    print(f"  {prog} <option> [<option>...]")
    print("Options:")
    print(f"  -d <string>  device name (default: {DEFAULT_DEVICE_NAME})")
    print(f"  -f <string>  output file name (default: {DEFAULT_OUTPUT_FILE})")
    print("  -o           dummy option (useful because at least one option is needed)")


def parse_args(argv: List[str], base: Optional[DiagConfig] = None) -> DiagConfig:
    """
    At least one argument is required; -d/-f need a value. Unrecognized
    arguments are ignored.
    """
    if not argv:
        raise UsageError("no options given")
    parsed, unknown = build_parser().parse_known_args(argv)
    if unknown:
        logger.debug(f"Ignoring arguments: {unknown}")
    config = base or DiagConfig()
    return config.with_overrides(device=parsed.device, output_file=parsed.output_file)


def run(config: DiagConfig, transport_factory: Callable[..., ELM327] = ELM327) -> int:
    print("initializing connection")
    raw_logger = TrafficLog(config.raw_log) if config.raw_log else None
    elm = transport_factory(
        config.device,
        baudrate=config.baudrate,
        timeout=config.timeout_s,
        raw_logger=raw_logger,
    )
    try:
        elm.open()
    except TransportOpenError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    try:
        elm.set_timeout(config.timeout_ms)

        print("initializing vehicle info pids")
        engine = QueryEngine(elm, mode=config.mode)
        report = ReportGenerator(engine)

        print("gathering data...")
        try:
            report.run(config.output_file)
        except QueryError as e:
            # pass aborted; exit status stays 0
            print(f"error: {e}", file=sys.stderr)
            return 0

        print("done")
        return 0
    finally:
        elm.close()


def main(argv: Optional[List[str]] = None) -> int:
    load_env_file()
    logging.basicConfig(
        level=getattr(logging, log_level(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    args = sys.argv[1:] if argv is None else argv
    try:
        config = parse_args(args, base=DiagConfig.from_env())
    except UsageError as e:
        logger.debug(f"Usage error: {e}")
        print_usage(PROG)
        return 1

    return run(config)


if __name__ == "__main__":
    raise SystemExit(main())
