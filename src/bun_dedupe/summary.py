"""Human-readable summary rendering for $GITHUB_STEP_SUMMARY."""

from __future__ import annotations

from pathlib import Path
from typing import Any


def render_summary(report: dict[str, Any]) -> str:
    """Return a Markdown string with totals and a table of hoisted packages."""
    totals = report.get("totals", {})
    promoted = {p.get("hoisted"): p for p in report.get("promotions", [])}
    hoisted_into = report.get("hoistedInto", {})

    lines = []
    lines.append("# bun-lock-dedupe Summary")
    lines.append("")
    lines.append(
        f"Lockfile: `{report.get('lockfile', '')}` | Mode: {report.get('mode', 'fix')} | "
        f"Hoisted: {totals.get('hoisted', 0)} | Promoted: {totals.get('promoted', 0)} | "
        f"Conflicts: {totals.get('conflicts', 0)}"
    )
    lines.append("")
    lines.append("| Nested package | Action | Ancestor |")
    lines.append("| --- | --- | --- |")

    for path in report.get("hoisted", []):
        promotion = promoted.get(path)
        if promotion:
            action = f"promoted ancestor {promotion.get('from')} → {promotion.get('to')}"
            ancestor = promotion.get("path", "")
        else:
            action = "hoisted"
            ancestor = hoisted_into.get(path, "")
        lines.append(f"| {path} | {action} | {ancestor} |")

    for conflict in report.get("conflicts", []):
        lines.append(
            f"| {conflict.get('path')} | kept ({conflict.get('requested')}) | "
            f"{conflict.get('outerPath')}@{conflict.get('outerVersion')} |"
        )

    if not report.get("hoisted") and not report.get("conflicts"):
        lines.append("| (none) | No duplicates found | n/a |")

    return "\n".join(lines) + "\n"


def append_summary(path: Path, report: dict[str, Any]) -> None:
    with path.open("a", encoding="utf-8") as fh:
        fh.write(render_summary(report))
