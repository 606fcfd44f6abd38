"""Data models for lockfile deduplication."""

from __future__ import annotations

from .hoist_result import Decision, HoistResult
from .package_record import NPM_RECORD_LENGTH, PackageRecord, RecordKind

__all__ = [
    "Decision",
    "HoistResult",
    "NPM_RECORD_LENGTH",
    "PackageRecord",
    "RecordKind",
]
