import sys
from pathlib import Path

import pytest

# Ensure repo_root/src is available on sys.path before any tests import project modules
REPO_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = REPO_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

FIXTURES = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # Runs on CI must not flip every test into check mode
    for name in ("CI", "GITHUB_STEP_SUMMARY", "BUN_DEDUPE_LOCKFILE"):
        monkeypatch.delenv(name, raising=False)


def npm(specifier: str, dependencies: dict | None = None, integrity: str = "sha512-x") -> list:
    metadata = {"dependencies": dependencies} if dependencies else {}
    return [specifier, "", metadata, integrity]


def lockfile_text(packages: dict, workspace_deps: dict | None = None) -> str:
    """Render a bun.lock the way bun lays it out."""
    from bun_dedupe.rewrite import format_entry

    lines = ["{", '  "lockfileVersion": 1,', '  "workspaces": {', '    "": {', '      "name": "fixture",']
    if workspace_deps:
        lines.append('      "dependencies": {')
        lines.extend(f'        "{name}": "{spec}",' for name, spec in workspace_deps.items())
        lines.append("      },")
    lines.extend(["    },", "  },", '  "packages": {'])
    for index, (path, value) in enumerate(packages.items()):
        if index:
            lines.append("")
        lines.append(format_entry(path, value))
    lines.extend(["  }", "}", ""])
    return "\n".join(lines)
