"""In-memory installation tree built from the lockfile ``packages`` block.

Paths follow node_modules nesting: ``"a/lodash"`` is the copy of lodash that
only ``a`` (and packages installed below ``a``) can see. Looking a dependency
up walks outward from the requesting package until an installed copy is found,
the same way node resolves ``require`` through parent ``node_modules``
directories.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from typing import Any

from .errors import LockfileFormatError, LockfileOrderError, UnresolvedDependencyError
from .models import PackageRecord
from .paths import decode, encode

# Sections of a workspace entry whose ranges constrain installed packages.
WORKSPACE_SECTIONS = ("dependencies", "devDependencies", "optionalDependencies")


class PackageTree:
    """Package records keyed by installation path, in lockfile order."""

    def __init__(
        self,
        records: Mapping[str, PackageRecord],
        workspaces: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> None:
        self.records: dict[str, PackageRecord] = dict(records)
        self.workspaces: dict[str, Mapping[str, Any]] = dict(workspaces or {})
        self._segments = {path: decode(path) for path in self.records}
        self._check_order()

    @classmethod
    def from_lockfile(cls, data: Mapping[str, Any]) -> PackageTree:
        records: dict[str, PackageRecord] = {}
        for path, value in data["packages"].items():
            try:
                records[path] = PackageRecord.from_lockfile(path, value)
            except ValueError as exc:
                raise LockfileFormatError(str(exc)) from exc
        return cls(records, data.get("workspaces") or {})

    def __contains__(self, path: object) -> bool:
        return path in self.records

    def __iter__(self) -> Iterator[str]:
        return iter(self.records)

    def __len__(self) -> int:
        return len(self.records)

    def __getitem__(self, path: str) -> PackageRecord:
        return self.records[path]

    def segments(self, path: str) -> list[str]:
        return list(self._segments[path])

    def _check_order(self) -> None:
        seen: set[str] = set()
        for path, segments in self._segments.items():
            if len(segments) > 1:
                parent = encode(segments[:-1])
                if parent in self.records and parent not in seen:
                    raise LockfileOrderError(
                        f"Package '{path}' is listed before its parent '{parent}'"
                    )
            seen.add(path)

    def resolve_ancestor(
        self,
        scope: str | Sequence[str],
        name: str,
        exclude: Callable[[str], bool] | None = None,
    ) -> str:
        """Return the path of the copy of ``name`` visible from ``scope``.

        ``scope`` is the requesting package's path (or its segments); an empty
        scope means the project root. Paths for which ``exclude`` returns True
        are treated as not installed.
        """
        if isinstance(scope, str):
            segments = decode(scope) if scope else []
        else:
            segments = list(scope)

        for depth in range(len(segments), -1, -1):
            candidate = encode([*segments[:depth], name])
            if candidate in self.records and not (exclude and exclude(candidate)):
                return candidate

        where = encode(segments) or "<root>"
        raise UnresolvedDependencyError(f"No installed copy of '{name}' is visible from '{where}'")

    def _workspace_scope(self, key: str, info: Mapping[str, Any]) -> list[str]:
        name = info.get("name")
        if key and name and name in self.records:
            return self.segments(name)
        return []

    def build_requirements(self) -> dict[str, list[str]]:
        """Map each installed path to every range requested of it.

        Workspace ranges come first, then registry packages in lockfile order.
        """
        requirements: dict[str, list[str]] = {}

        for key, info in self.workspaces.items():
            scope = self._workspace_scope(key, info)
            for section in WORKSPACE_SECTIONS:
                for name, spec in (info.get(section) or {}).items():
                    try:
                        target = self.resolve_ancestor(scope, name)
                    except UnresolvedDependencyError:
                        # optional dependencies may be absent for this platform
                        if section == "optionalDependencies":
                            continue
                        raise
                    requirements.setdefault(target, []).append(spec)

        for path, record in self.records.items():
            if not record.is_registry:
                continue
            for name, spec in record.dependencies.items():
                target = self.resolve_ancestor(self._segments[path], name)
                requirements.setdefault(target, []).append(spec)

        return requirements
