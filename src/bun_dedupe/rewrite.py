"""Rewrite the ``packages`` block of bun.lock text.

Only lines between ``  "packages": {`` and its closing ``  }`` are touched.
Each entry keeps its original bytes unless it is dropped (hoisted, or nested
under a hoisted path) or promoted, in which case it is printed again in bun's
inline style.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

from .errors import LockfileFormatError
from .models import HoistResult

PACKAGES_START = '  "packages": {'
PACKAGES_END = "  }"
ENTRY_INDENT = "    "

_ENTRY_RE = re.compile(r'^    ("(?:[^"\\]|\\.)*"): ')


def format_value(value: Any) -> str:
    """Print a lockfile value the way bun does: ``[a, b]``, ``{ "k": v }``, ``{}``."""
    if isinstance(value, (list, tuple)):
        return f"[{', '.join(format_value(item) for item in value)}]"
    if isinstance(value, dict):
        if not value:
            return "{}"
        items = ", ".join(
            f"{json.dumps(key, ensure_ascii=False)}: {format_value(item)}"
            for key, item in value.items()
        )
        return f"{{ {items} }}"
    return json.dumps(value, ensure_ascii=False)


def format_entry(path: str, value: Any) -> str:
    return f"{ENTRY_INDENT}{json.dumps(path, ensure_ascii=False)}: {format_value(value)},"


@dataclass
class _Entry:
    path: str
    leading: list[str] = field(default_factory=list)
    lines: list[str] = field(default_factory=list)


def _find_line(lines: list[str], wanted: str, start: int) -> int:
    for index in range(start, len(lines)):
        if lines[index].rstrip("\r") == wanted:
            return index
    raise LockfileFormatError(f"Could not find {wanted.strip()!r} in lockfile")


def _split_entries(body: list[str]) -> tuple[list[_Entry], list[str]]:
    """Group block lines into entries; return the entries and trailing blank lines."""
    entries: list[_Entry] = []
    pending: list[str] = []
    for line in body:
        if not line.strip():
            pending.append(line)
            continue
        match = _ENTRY_RE.match(line)
        if match:
            entries.append(_Entry(path=json.loads(match.group(1)), leading=pending, lines=[line]))
            pending = []
        elif entries and not pending:
            entries[-1].lines.append(line)
        else:
            raise LockfileFormatError(f"Unexpected line in packages block: {line!r}")
    return entries, pending


def rewrite_lockfile(text: str, result: HoistResult) -> str:
    """Return ``text`` with hoisted entries removed and promoted entries replaced."""
    lines = text.split("\n")
    start = _find_line(lines, PACKAGES_START, 0)
    end = _find_line(lines, PACKAGES_END, start + 1)
    entries, trailer = _split_entries(lines[start + 1 : end])

    present = {entry.path for entry in entries}
    missing = [p for p in (*result.hoisted, *result.promotions) if p not in present]
    if missing:
        raise LockfileFormatError(f"Packages not found in lockfile text: {', '.join(missing)}")

    first_leading = entries[0].leading if entries else []
    block: list[str] = []
    kept = 0
    for entry in entries:
        if result.is_removed(entry.path):
            continue
        block.extend(first_leading if kept == 0 else entry.leading)
        kept += 1
        promoted = result.promotions.get(entry.path)
        if promoted is None:
            block.extend(entry.lines)
        else:
            ending = "\r" if entry.lines[-1].endswith("\r") else ""
            block.append(format_entry(entry.path, promoted.to_list()) + ending)

    return "\n".join([*lines[: start + 1], *block, *trailer, *lines[end:]])
