from __future__ import annotations

from elm327diag_cli.main import main


if __name__ == "__main__":
    raise SystemExit(main())
