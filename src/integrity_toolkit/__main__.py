"""Allow `python -m integrity_toolkit`."""

from __future__ import annotations

from integrity_toolkit.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
