"""Core dedupe entrypoint: load, analyze, then report or rewrite.

This module MUST NOT print; the CLI decides how results are shown so the same
pipeline can back other wrappers (CI steps, editor tasks).
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .config import Settings
from .hoisting import analyze
from .models import HoistResult
from .parsers.bun_lock import parse_text, read_text
from .report import aggregate
from .rewrite import rewrite_lockfile
from .summary import append_summary
from .tree import PackageTree


@dataclass(frozen=True)
class DedupeRun:
    """Result of one pipeline pass."""

    result: HoistResult
    report: dict[str, Any]
    written: bool


def write_atomic(path: Path, text: str) -> None:
    """Replace ``path`` with ``text`` in one step; the old file survives any failure."""
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(text.encode("utf-8"))
        os.chmod(tmp_name, path.stat().st_mode & 0o7777)
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise


def dedupe_lockfile(settings: Settings) -> DedupeRun:
    """Run the dedupe pipeline against ``settings.lockfile``.

    In check mode, or when nothing is redundant, the lockfile is never
    written. Raises DedupeError subclasses for unusable lockfiles and OSError
    for I/O failures.
    """
    text = read_text(settings.lockfile)
    tree = PackageTree.from_lockfile(parse_text(text))
    result = analyze(tree)

    written = False
    if result and not settings.check:
        write_atomic(settings.lockfile, rewrite_lockfile(text, result))
        written = True

    report = aggregate(str(settings.lockfile), result, check=settings.check, written=written)

    if settings.summary_path is not None:
        append_summary(settings.summary_path, report)

    return DedupeRun(result=result, report=report, written=written)
