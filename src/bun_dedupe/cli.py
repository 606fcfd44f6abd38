"""Remove nested bun.lock packages that an ancestor copy already satisfies."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import FIX_COMMAND, load_settings
from .core import dedupe_lockfile
from .errors import DedupeError

EXIT_OK = 0
EXIT_DUPLICATES = 1
EXIT_ERROR = 2


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog=FIX_COMMAND, description=__doc__)
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only report duplicates; exit 1 when any are found (implied when CI is set)",
    )
    parser.add_argument(
        "--lockfile",
        type=Path,
        default=None,
        help="Path to bun.lock, or a directory containing it (default: ./bun.lock)",
    )
    parser.add_argument("--json", dest="json_output", action="store_true", help="Print a JSON report")
    parser.add_argument(
        "--verbose", action="store_true", help="Explain every hoisting decision on stderr"
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        settings = load_settings(
            lockfile=args.lockfile,
            check=args.check,
            json_output=args.json_output,
            verbose=args.verbose,
        )
        run = dedupe_lockfile(settings)
    except DedupeError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_ERROR
    except OSError as exc:
        print(f"ERROR: Failed to access lockfile: {exc}", file=sys.stderr)
        return EXIT_ERROR
    except UnicodeDecodeError as exc:
        print(f"ERROR: Lockfile is not valid UTF-8: {exc}", file=sys.stderr)
        return EXIT_ERROR

    if settings.verbose:
        for decision in run.result.decisions:
            print(decision.describe(), file=sys.stderr)

    hoisted = ", ".join(run.result.hoisted)
    if settings.json_output:
        print(json.dumps(run.report, indent=2))
    elif not run.result:
        print("No duplicates found")
    elif settings.check:
        print(f"Duplicates found: {hoisted}")
        print(f"Run `{FIX_COMMAND}` to fix")
    else:
        print(f"Duplicates removed: {hoisted}")

    if run.result and settings.check:
        return EXIT_DUPLICATES
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
