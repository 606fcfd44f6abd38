import json
import shutil
from pathlib import Path

import pytest

from bun_dedupe.cli import EXIT_DUPLICATES, EXIT_ERROR, EXIT_OK, main

from conftest import FIXTURES, lockfile_text, npm

SCENARIOS = [
    ("hoist-satisfied", [], EXIT_OK),
    ("promote-ancestor", [], EXIT_OK),
    ("version-conflict", [], EXIT_OK),
    ("check-mode", ["--check"], EXIT_DUPLICATES),
    ("scoped-and-git", [], EXIT_OK),
]


def _copy_case(case: str, tmp_path: Path) -> Path:
    workdir = tmp_path / case
    shutil.copytree(FIXTURES / case, workdir)
    return workdir


@pytest.mark.parametrize("case, args, exit_code", SCENARIOS)
def test_scenario(case, args, exit_code, tmp_path, monkeypatch, capsys):
    workdir = _copy_case(case, tmp_path)
    monkeypatch.chdir(workdir)

    assert main(args) == exit_code

    expected = workdir / "expected"
    assert capsys.readouterr().out == (expected / "output.txt").read_text(encoding="utf-8")
    assert (workdir / "bun.lock").read_bytes() == (expected / "bun.lock").read_bytes()


@pytest.mark.parametrize("case", ["hoist-satisfied", "promote-ancestor", "scoped-and-git"])
def test_second_run_finds_nothing(case, tmp_path, capsys):
    workdir = _copy_case(case, tmp_path)
    lockfile = workdir / "bun.lock"

    assert main(["--lockfile", str(lockfile)]) == EXIT_OK
    first = lockfile.read_bytes()
    capsys.readouterr()

    assert main(["--lockfile", str(lockfile)]) == EXIT_OK
    assert capsys.readouterr().out == "No duplicates found\n"
    assert lockfile.read_bytes() == first


def test_ci_variable_implies_check(tmp_path, monkeypatch, capsys):
    workdir = _copy_case("hoist-satisfied", tmp_path)
    monkeypatch.setenv("CI", "1")
    before = (workdir / "bun.lock").read_bytes()

    assert main(["--lockfile", str(workdir)]) == EXIT_DUPLICATES
    assert "Duplicates found: a/lodash" in capsys.readouterr().out
    assert (workdir / "bun.lock").read_bytes() == before


def test_json_report(tmp_path, capsys):
    workdir = _copy_case("promote-ancestor", tmp_path)

    assert main(["--lockfile", str(workdir), "--json"]) == EXIT_OK
    report = json.loads(capsys.readouterr().out)
    assert report["hasDuplicates"] is True
    assert report["written"] is True
    assert report["hoisted"] == ["a/lodash"]
    assert report["promotions"] == [
        {"path": "lodash", "from": "4.0.0", "to": "4.1.0", "hoisted": "a/lodash"}
    ]
    assert report["totals"] == {"hoisted": 1, "promoted": 1, "conflicts": 0}


def test_verbose_explains_decisions(tmp_path, capsys):
    workdir = _copy_case("version-conflict", tmp_path)

    assert main(["--lockfile", str(workdir), "--verbose"]) == EXIT_OK
    err = capsys.readouterr().err
    assert "a/lodash: keeping 2.0.0, lodash@1.0.0 does not satisfy ^2.0.0" in err


def test_step_summary_is_appended(tmp_path, monkeypatch, capsys):
    workdir = _copy_case("hoist-satisfied", tmp_path)
    summary = tmp_path / "summary.md"
    summary.write_text("existing\n", encoding="utf-8")
    monkeypatch.setenv("GITHUB_STEP_SUMMARY", str(summary))

    assert main(["--lockfile", str(workdir)]) == EXIT_OK
    content = summary.read_text(encoding="utf-8")
    assert content.startswith("existing\n# bun-lock-dedupe Summary\n")
    assert "| a/lodash | hoisted | lodash |" in content


def test_missing_lockfile_exits_with_error(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)

    assert main([]) == EXIT_ERROR
    assert capsys.readouterr().err.startswith("ERROR: Lockfile not found")


def test_unresolvable_dependency_aborts_without_writing(tmp_path, capsys):
    lockfile = tmp_path / "bun.lock"
    text = lockfile_text(
        {
            "a": npm("a@1.0.0", {"ghost": "^1.0.0", "lodash": "^4.0.0"}),
            "a/lodash": npm("lodash@4.0.0"),
            "lodash": npm("lodash@4.0.0"),
        }
    )
    lockfile.write_text(text, encoding="utf-8")

    assert main(["--lockfile", str(lockfile)]) == EXIT_ERROR
    assert "No installed copy of 'ghost'" in capsys.readouterr().err
    assert lockfile.read_text(encoding="utf-8") == text


def test_malformed_path_aborts(tmp_path, capsys):
    lockfile = tmp_path / "bun.lock"
    lockfile.write_text('{\n  "packages": {\n    "@scope": ["@scope@1.0.0", "", {}, "x"],\n  }\n}\n')

    assert main(["--lockfile", str(lockfile)]) == EXIT_ERROR
    assert "Scope without package name" in capsys.readouterr().err
