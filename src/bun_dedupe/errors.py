"""Exception hierarchy shared by the loader, tree and rewriter."""

from __future__ import annotations


class DedupeError(RuntimeError):
    """Base error for failures that abort a dedupe run."""


class LockfileError(DedupeError):
    """Raised when the lockfile is structurally unusable."""


class LockfileFormatError(LockfileError):
    """Raised when the lockfile text cannot be parsed or fails schema validation."""


class LockfileOrderError(LockfileError):
    """Raised when a nested package is listed before the package it is nested in."""


class MalformedPathError(LockfileError):
    """Raised when an installation path cannot be split into package names."""


class UnresolvedDependencyError(LockfileError):
    """Raised when a declared dependency has no installed copy anywhere in scope."""


class ConfigError(DedupeError):
    """Raised when command-line or environment settings are invalid."""
