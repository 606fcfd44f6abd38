"""npm semver range handling built atop packaging.version.

Supported expressions:
- exact versions (e.g., "1.2.3", "=1.2.3", "v1.2.3")
- caret ranges ^x.y.z, including npm's 0.x rules (^0.2.3 → >=0.2.3,<0.3.0)
- tilde ranges ~x.y.z → >=x.y.z,<x.y+1.0
- x-ranges "1.x", "1.2.*", "*", "" and partial versions "1", "1.2"
- comparator sets split by spaces, e.g., ">=1.0.0 <2.0.0"
- hyphen ranges "1.2.3 - 2.3.4"
- unions joined with "||"

The major.minor.patch core is a ``packaging`` Version; prerelease tags keep
npm's ordering: dot-separated identifiers, numeric ones compared as numbers
and below alphanumeric ones, which compare as ASCII strings. A prerelease only
satisfies a range that names a prerelease of the same major.minor.patch, as
npm does. Anything that does not parse (dist-tags, ``npm:`` aliases, git URLs)
never satisfies.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering

from packaging.version import InvalidVersion, Version

_PARTIAL_RE = re.compile(
    r"^v?(?P<major>\d+|[xX*])"
    r"(?:\.(?P<minor>\d+|[xX*]))?"
    r"(?:\.(?P<patch>\d+|[xX*]))?"
    r"(?:-(?P<pre>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z.-]+)?$"
)
_HYPHEN_RE = re.compile(r"^\s*(\S+)\s+-\s+(\S+)\s*$")
_OPERATOR_SPACE_RE = re.compile(r"(<=|>=|<|>|=|\^|~>?)\s+")
_OPERATOR_RE = re.compile(r"^(<=|>=|~>|<|>|=|\^|~)")


def _identifier_key(identifier: str) -> tuple[int, int, str]:
    if identifier.isdigit():
        return (0, int(identifier), "")
    return (1, 0, identifier)


@total_ordering
@dataclass(frozen=True, eq=False)
class NpmVersion:
    """A semver version ordered the way npm orders it."""

    release: Version
    pre: tuple[str, ...] = ()

    @property
    def is_prerelease(self) -> bool:
        return bool(self.pre)

    def _key(self) -> tuple:
        # a release sorts above all of its prereleases
        return (self.release, not self.pre, tuple(_identifier_key(p) for p in self.pre))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NpmVersion):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: NpmVersion) -> bool:
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())


Constraint = tuple[str, NpmVersion]


def _to_version(release: list[int], pre: str | None = None) -> NpmVersion:
    core = Version(".".join(str(n) for n in release))
    return NpmVersion(release=core, pre=tuple(pre.split(".")) if pre else ())


def _parse_partial(text: str) -> tuple[list[int], str | None]:
    """Return the numeric parts given before the first wildcard, and the prerelease tag."""
    match = _PARTIAL_RE.match(text.strip())
    if not match:
        raise InvalidVersion(f"Invalid version: {text!r}")
    parts: list[int] = []
    for key in ("major", "minor", "patch"):
        value = match.group(key)
        if value is None or not value.isdigit():
            break
        parts.append(int(value))
    pre = match.group("pre") if len(parts) == 3 else None
    return parts, pre


def _parse_version(v: str) -> NpmVersion:
    parts, pre = _parse_partial(v)
    if len(parts) != 3:
        raise InvalidVersion(f"Incomplete version: {v!r}")
    return _to_version(parts, pre)


def _floor(parts: list[int], pre: str | None = None) -> NpmVersion:
    return _to_version(parts + [0] * (3 - len(parts)), pre)


def _bump(parts: list[int], index: int) -> NpmVersion:
    """Smallest version above every version that shares ``parts[: index + 1]``."""
    bumped = parts[:index] + [parts[index] + 1]
    return _floor(bumped)


def _next_major(v: NpmVersion) -> NpmVersion:
    return _floor([v.release.major + 1])


def _next_minor(v: NpmVersion) -> NpmVersion:
    return _floor([v.release.major, v.release.minor + 1])


_NOTHING: list[Constraint] = [("<", _floor([0]))]


def _expand(op: str, text: str) -> list[Constraint]:
    parts, pre = _parse_partial(text)
    n = len(parts)

    if op in ("", "="):
        if n == 0:
            return []
        if n == 3:
            return [("==", _to_version(parts, pre))]
        return [(">=", _floor(parts)), ("<", _bump(parts, n - 1))]

    if op == ">":
        if n == 0:
            return list(_NOTHING)
        if n == 3:
            return [(">", _to_version(parts, pre))]
        return [(">=", _bump(parts, n - 1))]

    if op == ">=":
        return [(">=", _floor(parts, pre))] if n else []

    if op == "<":
        return [("<", _floor(parts, pre))] if n else list(_NOTHING)

    if op == "<=":
        if n == 0:
            return []
        if n == 3:
            return [("<=", _to_version(parts, pre))]
        return [("<", _bump(parts, n - 1))]

    if op in ("~", "~>"):
        if n == 0:
            return []
        lower = _floor(parts, pre)
        return [(">=", lower), ("<", _next_major(lower) if n == 1 else _next_minor(lower))]

    if op == "^":
        if n == 0:
            return []
        lower = _floor(parts, pre)
        if parts[0] != 0 or n == 1:
            upper = _bump(parts, 0)
        elif parts[1] != 0 or n == 2:
            upper = _bump(parts, 1)
        else:
            upper = _bump(parts, 2)
        return [(">=", lower), ("<", upper)]

    raise InvalidVersion(f"Unsupported operator: {op!r}")


def _parse_comparator_set(expr: str) -> list[Constraint]:
    hyphen = _HYPHEN_RE.match(expr)
    if hyphen:
        low_parts, low_pre = _parse_partial(hyphen.group(1))
        high_parts, high_pre = _parse_partial(hyphen.group(2))
        constraints: list[Constraint] = []
        if low_parts:
            constraints.append((">=", _floor(low_parts, low_pre)))
        if len(high_parts) == 3:
            constraints.append(("<=", _to_version(high_parts, high_pre)))
        elif high_parts:
            constraints.append(("<", _bump(high_parts, len(high_parts) - 1)))
        return constraints

    constraints = []
    for token in _OPERATOR_SPACE_RE.sub(r"\1", expr).split():
        operator = _OPERATOR_RE.match(token)
        op = operator.group(1) if operator else ""
        constraints.extend(_expand(op, token[len(op) :]))
    return constraints


def _check(v: NpmVersion, constraints: list[Constraint]) -> bool:
    for op, bound in constraints:
        if op == "==" and not v == bound:
            return False
        if op == ">" and not v > bound:
            return False
        if op == ">=" and not v >= bound:
            return False
        if op == "<" and not v < bound:
            return False
        if op == "<=" and not v <= bound:
            return False

    if v.is_prerelease:
        return any(
            bound.is_prerelease and bound.release == v.release for _, bound in constraints
        )
    return True


def satisfies(installed: str, expr: str) -> bool:
    try:
        v = _parse_version(installed)
        return any(_check(v, _parse_comparator_set(part)) for part in expr.split("||"))
    except InvalidVersion:
        return False
