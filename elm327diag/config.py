from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, MutableMapping, Optional, Union

DEFAULT_DEVICE_NAME = "/dev/pts/8"
DEFAULT_OUTPUT_FILE = "carstats.csv"
DEFAULT_TIMEOUT_MS = 3000
DEFAULT_BAUDRATE = 38400
ENV_FILE_NAME = ".env"


def parse_env_file(text: str) -> Dict[str, str]:
    """
    ``KEY=VALUE`` pairs of a dotenv file. Comments, blank lines and lines
    without ``=`` are skipped; one level of matching quotes is removed.
    """
    pairs: Dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep or not key or key.startswith("#"):
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        pairs[key] = value
    return pairs


def load_env_file(
    path: Union[str, Path, None] = None,
    environ: Optional[MutableMapping[str, str]] = None,
) -> Dict[str, str]:
    """
    Fill the environment from a dotenv file (``./.env`` by default).
    Variables already set win. Returns the pairs actually applied.
    """
    target = Path(path) if path is not None else Path.cwd() / ENV_FILE_NAME
    env = os.environ if environ is None else environ
    if not target.is_file():
        return {}

    applied = {k: v for k, v in parse_env_file(target.read_text(encoding="utf-8")).items() if k not in env}
    env.update(applied)
    return applied


def timeout_ms() -> int:
    try:
        value = int(os.environ.get("ELM327DIAG_TIMEOUT_MS", str(DEFAULT_TIMEOUT_MS)))
    except ValueError:
        return DEFAULT_TIMEOUT_MS
    return value if value > 0 else DEFAULT_TIMEOUT_MS


def baudrate() -> int:
    try:
        return int(os.environ.get("ELM327DIAG_BAUDRATE", str(DEFAULT_BAUDRATE)))
    except ValueError:
        return DEFAULT_BAUDRATE


def raw_log_path() -> Optional[str]:
    return os.environ.get("ELM327DIAG_RAW_LOG") or None


def log_level() -> str:
    return os.environ.get("ELM327DIAG_LOG_LEVEL", "WARNING").upper()


@dataclass(frozen=True)
class DiagConfig:
    """Settings for one run, built once and passed to every component."""
    device: str = DEFAULT_DEVICE_NAME
    output_file: str = DEFAULT_OUTPUT_FILE
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    baudrate: int = DEFAULT_BAUDRATE
    mode: int = 0x01
    raw_log: Optional[str] = None

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000

    @classmethod
    def from_env(cls) -> "DiagConfig":
        return cls(timeout_ms=timeout_ms(), baudrate=baudrate(), raw_log=raw_log_path())

    def with_overrides(self, device: Optional[str] = None, output_file: Optional[str] = None) -> "DiagConfig":
        """Values given on the command line are used as-is, empty strings included."""
        changes = {}
        if device is not None:
            changes["device"] = device
        if output_file is not None:
            changes["output_file"] = output_file
        return replace(self, **changes) if changes else self
