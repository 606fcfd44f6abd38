"""Report aggregation and JSON-friendly output."""

from __future__ import annotations

from typing import Any

from .models import HoistResult


def aggregate(lockfile: str, result: HoistResult, *, check: bool, written: bool) -> dict[str, Any]:
    """Summarise one run as a plain dict.

    ``promotions`` lists each ancestor that now carries a nested version, with
    the version it had before; ``conflicts`` lists nested copies that had to
    stay because neither copy satisfies every dependent.
    """
    promotions = [
        {
            "path": d.outer_path,
            "from": d.outer_version,
            "to": d.nested_version,
            "hoisted": d.path,
        }
        for d in result.decisions
        if d.action == "promoted"
    ]
    conflicts = [d.to_dict() for d in result.conflicts]

    report: dict[str, Any] = {
        "version": "1",
        "lockfile": lockfile,
        "mode": "check" if check else "fix",
        "hasDuplicates": bool(result.hoisted),
        "written": written,
        "hoisted": list(result.hoisted),
        "hoistedInto": {
            d.path: d.outer_path for d in result.decisions if d.action in ("hoisted", "promoted")
        },
        "promotions": promotions,
        "conflicts": conflicts,
        "totals": {
            "hoisted": len(result.hoisted),
            "promoted": len(promotions),
            "conflicts": len(conflicts),
        },
    }

    return report
