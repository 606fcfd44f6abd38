"""Decide which nested package copies are redundant.

Packages are visited in lockfile order, which lists a package before anything
nested inside it. For every dependency ``name`` of a package ``D`` that got its
own nested copy ``D/name``, the copy visible one level above ``D`` is compared
against it:

1. if that outer copy already satisfies every range placed on ``D/name``, the
   nested copy is dropped;
2. otherwise, if the nested version satisfies every range placed on the outer
   copy (and its own dependencies still resolve from the outer location), the
   outer copy is promoted to the nested record and the nested copy is dropped;
3. otherwise both copies are required and stay.

Dropping ``D/name`` also drops everything installed below it, and the ranges
that pointed at ``D/name`` are moved onto the outer copy so that later
promotion checks account for them. A promoted outer path is later visited as
the record it was promoted to, and that record's own ranges are added to the
copies it resolves from its new location.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from .errors import UnresolvedDependencyError
from .models import Decision, HoistResult, PackageRecord
from .parsers.semver import satisfies
from .paths import encode, is_within
from .tree import PackageTree


def _satisfies_all(version: str, ranges: Sequence[str]) -> bool:
    return all(satisfies(version, spec) for spec in ranges)


class HoistingAnalyzer:
    """Single pass over a :class:`PackageTree`; call :meth:`run` once."""

    def __init__(
        self,
        tree: PackageTree,
        requirements: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        self.tree = tree
        if requirements is None:
            requirements = tree.build_requirements()
        self.requirements: dict[str, list[str]] = {
            path: list(ranges) for path, ranges in requirements.items()
        }
        self.hoisted: list[str] = []
        self.promotions: dict[str, PackageRecord] = {}
        self.decisions: list[Decision] = []

    def is_removed(self, path: str) -> bool:
        return any(is_within(path, hoisted) for hoisted in self.hoisted)

    def effective(self, path: str) -> PackageRecord:
        return self.promotions.get(path) or self.tree[path]

    def _dependencies_fit(self, record: PackageRecord, at: str, dropping: str) -> bool:
        """True when every dependency of ``record`` resolves acceptably if installed at ``at``."""

        def gone(path: str) -> bool:
            return is_within(path, dropping) or self.is_removed(path)

        scope = self.tree.segments(at)
        for name, spec in record.dependencies.items():
            try:
                target = self.tree.resolve_ancestor(scope, name, exclude=gone)
            except UnresolvedDependencyError:
                return False
            if not satisfies(self.effective(target).version, spec):
                return False
        return True

    def _hoist(self, nested_path: str, outer_path: str) -> None:
        self.hoisted.append(nested_path)
        moved = self.requirements.pop(nested_path, [])
        self.requirements.setdefault(outer_path, []).extend(moved)

    def _promote(self, outer_path: str, record: PackageRecord) -> None:
        """Install ``record`` at ``outer_path`` and record the ranges it places on its dependencies."""
        self.promotions[outer_path] = record
        scope = self.tree.segments(outer_path)
        for name, spec in record.dependencies.items():
            target = self.tree.resolve_ancestor(scope, name, exclude=self.is_removed)
            self.requirements.setdefault(target, []).append(spec)

    def _visit(self, segments: list[str], record: PackageRecord) -> None:
        for name, requested in record.dependencies.items():
            nested_path = encode([*segments, name])
            if nested_path not in self.tree:
                continue

            nested = self.tree[nested_path]
            try:
                outer_path = self.tree.resolve_ancestor(
                    segments[:-1], name, exclude=self.is_removed
                )
            except UnresolvedDependencyError:
                self.decisions.append(
                    Decision(
                        path=nested_path,
                        outer_path="",
                        action="unresolved",
                        requested=requested,
                        nested_version=nested.version,
                        outer_version="",
                    )
                )
                continue
            outer = self.effective(outer_path)
            if not nested.is_registry or not outer.is_registry:
                continue

            nested_ranges = [requested, *self.requirements.get(nested_path, [])]
            decision = dict(
                path=nested_path,
                outer_path=outer_path,
                requested=requested,
                nested_version=nested.version,
                outer_version=outer.version,
            )

            if _satisfies_all(outer.version, nested_ranges):
                self._hoist(nested_path, outer_path)
                self.decisions.append(Decision(action="hoisted", **decision))
            elif (
                outer_path not in self.promotions
                and _satisfies_all(nested.version, self.requirements.get(outer_path, []))
                and _satisfies_all(nested.version, nested_ranges)
                and self._dependencies_fit(nested, outer_path, nested_path)
            ):
                self._hoist(nested_path, outer_path)
                self._promote(outer_path, nested)
                self.decisions.append(Decision(action="promoted", **decision))
            else:
                self.decisions.append(Decision(action="conflict", **decision))

    def run(self) -> HoistResult:
        for path in self.tree:
            segments = self.tree.segments(path)
            if len(segments) > 1 and self.is_removed(path):
                continue
            record = self.effective(path)
            if not record.is_registry:
                continue
            self._visit(segments, record)

        return HoistResult(
            hoisted=tuple(self.hoisted),
            promotions=dict(self.promotions),
            decisions=tuple(self.decisions),
        )


def analyze(
    tree: PackageTree, requirements: Mapping[str, Sequence[str]] | None = None
) -> HoistResult:
    return HoistingAnalyzer(tree, requirements).run()
