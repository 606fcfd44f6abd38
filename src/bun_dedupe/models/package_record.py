"""Package record model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

# [specifier, registry, metadata, integrity]
NPM_RECORD_LENGTH = 4


class RecordKind(Enum):
    """Variant of a bun.lock package array, decided once when the record is loaded."""

    NPM = "npm"
    OTHER = "other"


@dataclass(frozen=True)
class PackageRecord:
    """One entry of the lockfile ``packages`` block."""

    path: str
    kind: RecordKind
    fields: tuple[Any, ...]

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("Package path must be non-empty")
        if not self.fields or not isinstance(self.fields[0], str):
            raise ValueError(f"Package '{self.path}' must start with a specifier string")
        if self.kind is RecordKind.NPM:
            if len(self.fields) != NPM_RECORD_LENGTH:
                raise ValueError(f"Registry package '{self.path}' must have 4 fields")
            if not isinstance(self.fields[2], dict):
                raise ValueError(f"Registry package '{self.path}' has no metadata object")

    @property
    def specifier(self) -> str:
        return self.fields[0]

    @property
    def version(self) -> str:
        return self.specifier[self.specifier.rfind("@") + 1 :]

    @property
    def is_registry(self) -> bool:
        return self.kind is RecordKind.NPM

    @property
    def dependencies(self) -> dict[str, str]:
        """Declared dependency ranges; empty for anything but registry packages."""
        if not self.is_registry:
            return {}
        deps = self.fields[2].get("dependencies") or {}
        return {str(name): str(spec) for name, spec in deps.items()}

    def to_list(self) -> list[Any]:
        return list(self.fields)

    @classmethod
    def from_lockfile(cls, path: str, value: list[Any]) -> PackageRecord:
        kind = RecordKind.NPM if len(value) == NPM_RECORD_LENGTH else RecordKind.OTHER
        return cls(path=path, kind=kind, fields=tuple(value))
