#!/usr/bin/env python3
"""Local entrypoint to dedupe a bun.lock without installing the package.

Usage:
  python scripts/dedupe.py [--check] [--lockfile path] [--json] [--verbose]

This calls the same CLI as the ``bun-lock-dedupe`` console script.
"""

from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from bun_dedupe.cli import main  # noqa: E402

if __name__ == "__main__":
    raise SystemExit(main())
