"""Outcome of a hoisting analysis."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..paths import is_within
from .package_record import PackageRecord

_VALID_ACTIONS = {"hoisted", "promoted", "conflict", "unresolved"}


@dataclass(frozen=True)
class Decision:
    """Why a nested copy was dropped or kept.

    ``outer_path`` and ``outer_version`` are empty for ``unresolved``.
    """

    path: str
    outer_path: str
    action: str
    requested: str
    nested_version: str
    outer_version: str

    def __post_init__(self) -> None:
        if self.action not in _VALID_ACTIONS:
            raise ValueError(f"Invalid action: {self.action}")

    def describe(self) -> str:
        if self.action == "hoisted":
            return (
                f"{self.path}: {self.outer_path}@{self.outer_version} satisfies "
                f"{self.requested}, dropping nested {self.nested_version}"
            )
        if self.action == "promoted":
            return (
                f"{self.path}: promoting {self.outer_path} from {self.outer_version} "
                f"to {self.nested_version}"
            )
        if self.action == "unresolved":
            return f"{self.path}: no other copy is installed, keeping nested {self.nested_version}"
        return (
            f"{self.path}: keeping {self.nested_version}, {self.outer_path}@"
            f"{self.outer_version} does not satisfy {self.requested}"
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "path": self.path,
            "outerPath": self.outer_path,
            "action": self.action,
            "requested": self.requested,
            "nestedVersion": self.nested_version,
            "outerVersion": self.outer_version,
        }


@dataclass(frozen=True)
class HoistResult:
    """Paths to drop from the lockfile and ancestors that take a nested record."""

    hoisted: tuple[str, ...]
    promotions: dict[str, PackageRecord] = field(default_factory=dict)
    decisions: tuple[Decision, ...] = ()

    def __bool__(self) -> bool:
        return bool(self.hoisted)

    def is_removed(self, path: str) -> bool:
        """True when ``path`` is hoisted or installed below a hoisted path."""
        return any(is_within(path, p) for p in self.hoisted)

    @property
    def conflicts(self) -> tuple[Decision, ...]:
        return tuple(d for d in self.decisions if d.action == "conflict")
