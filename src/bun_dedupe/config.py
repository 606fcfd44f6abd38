"""Run settings resolved from command-line flags and the environment.

The lockfile location is resolved in priority order:

1. Explicit ``--lockfile`` argument (a file, or a directory holding bun.lock)
2. ``BUN_DEDUPE_LOCKFILE`` environment variable
3. ``bun.lock`` in the current working directory

Check-only mode is enabled by ``--check`` or by a ``CI`` environment variable
with any non-empty value, ``CI=false`` included.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError

LOCKFILE_NAME = "bun.lock"
LOCKFILE_ENV_VAR = "BUN_DEDUPE_LOCKFILE"
CI_ENV_VAR = "CI"
SUMMARY_ENV_VAR = "GITHUB_STEP_SUMMARY"
FIX_COMMAND = "bun-lock-dedupe"


@dataclass(slots=True, frozen=True)
class Settings:
    """Everything one dedupe run needs to know."""

    lockfile: Path
    check: bool = False
    json_output: bool = False
    verbose: bool = False
    summary_path: Path | None = None


def _resolve_lockfile_path(
    path: Path | str | None, environ: Mapping[str, str], cwd: Path
) -> Path:
    if path is None:
        path = environ.get(LOCKFILE_ENV_VAR) or None
    if path is None:
        return cwd / LOCKFILE_NAME

    resolved = Path(path)
    if not resolved.is_absolute():
        resolved = cwd / resolved
    if resolved.is_dir():
        resolved = resolved / LOCKFILE_NAME
    return resolved


def load_settings(
    *,
    lockfile: Path | str | None = None,
    check: bool = False,
    json_output: bool = False,
    verbose: bool = False,
    environ: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> Settings:
    """Build :class:`Settings`, raising ConfigError when no lockfile can be found."""
    environ = os.environ if environ is None else environ
    cwd = Path.cwd() if cwd is None else cwd

    lockfile_path = _resolve_lockfile_path(lockfile, environ, cwd)
    if not lockfile_path.is_file():
        raise ConfigError(f"Lockfile not found: {lockfile_path}")

    summary = environ.get(SUMMARY_ENV_VAR)
    return Settings(
        lockfile=lockfile_path,
        check=check or bool(environ.get(CI_ENV_VAR)),
        json_output=json_output,
        verbose=verbose,
        summary_path=Path(summary) if summary else None,
    )
