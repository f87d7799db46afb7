"""CLI launcher for the ship sort command runner."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from ship_sort.app import main


def run() -> int:
    """Invoke the command-line entry point."""
    return main(sys.argv[1:])


if __name__ == "__main__":
    raise SystemExit(run())
