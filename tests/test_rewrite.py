import json

import pytest

from bun_dedupe.errors import LockfileFormatError
from bun_dedupe.models import HoistResult, PackageRecord
from bun_dedupe.parsers.bun_lock import parse_text, read_text
from bun_dedupe.rewrite import format_entry, format_value, rewrite_lockfile

from conftest import FIXTURES, lockfile_text, npm


@pytest.mark.parametrize("case", ["hoist-satisfied", "promote-ancestor", "scoped-and-git"])
def test_format_entry_reproduces_every_fixture_line(case):
    text = read_text(FIXTURES / case / "bun.lock")
    data = parse_text(text)
    lines = set(text.split("\n"))
    for path, value in data["packages"].items():
        assert format_entry(path, value) in lines, json.dumps(path)


def test_format_value_matches_bun_inline_style():
    value = ["a@1.0.0", "", {"dependencies": {"b": "^1.0.0"}, "optionalPeers": ["c"], "os": "darwin"}, "sha"]
    assert format_value(value) == (
        '["a@1.0.0", "", { "dependencies": { "b": "^1.0.0" }, "optionalPeers": ["c"], '
        '"os": "darwin" }, "sha"]'
    )
    assert format_value({}) == "{}"
    assert format_value([]) == "[]"
    assert format_value(True) == "true"
    assert format_value("café") == '"café"'


def test_dropping_entries_keeps_other_bytes():
    text = lockfile_text(
        {
            "a": npm("a@1.0.0", {"lodash": "^4.0.0"}),
            "a/lodash": npm("lodash@4.0.0", {"dep": "^1.0.0"}),
            "a/lodash/dep": npm("dep@1.0.0"),
            "lodash": npm("lodash@4.0.0"),
        }
    )
    out = rewrite_lockfile(text, HoistResult(hoisted=("a/lodash",)))
    expected = lockfile_text(
        {
            "a": npm("a@1.0.0", {"lodash": "^4.0.0"}),
            "lodash": npm("lodash@4.0.0"),
        }
    )
    assert out == expected


def test_dropping_the_first_entry_leaves_no_leading_blank_line():
    text = lockfile_text(
        {
            "@a/x": npm("@a/x@1.0.0"),
            "@a/x/@a/y": npm("@a/y@1.0.0"),
            "z": npm("z@1.0.0"),
        }
    )
    out = rewrite_lockfile(text, HoistResult(hoisted=("@a/x",)))
    assert out == lockfile_text({"z": npm("z@1.0.0")})


def test_promoted_entry_is_reprinted_in_place():
    text = lockfile_text(
        {
            "a": npm("a@1.0.0", {"lodash": "^4.1.0"}),
            "a/lodash": npm("lodash@4.1.0", integrity="sha512-new"),
            "lodash": npm("lodash@4.0.0", integrity="sha512-old"),
        }
    )
    promoted = PackageRecord.from_lockfile("a/lodash", npm("lodash@4.1.0", integrity="sha512-new"))
    out = rewrite_lockfile(text, HoistResult(hoisted=("a/lodash",), promotions={"lodash": promoted}))
    assert out == lockfile_text(
        {
            "a": npm("a@1.0.0", {"lodash": "^4.1.0"}),
            "lodash": npm("lodash@4.1.0", integrity="sha512-new"),
        }
    )


def test_content_outside_packages_block_is_untouched():
    text = lockfile_text({"a": npm("a@1.0.0"), "a/b": npm("b@1.0.0")}).rstrip("\n")
    text = text.replace('"lockfileVersion": 1,', '"lockfileVersion": 1,   ')
    out = rewrite_lockfile(text, HoistResult(hoisted=("a/b",)))
    assert out.startswith('{\n  "lockfileVersion": 1,   \n')
    assert out.endswith("  }\n}")
    assert '"a/b"' not in out


def test_crlf_line_endings_are_preserved():
    text = lockfile_text(
        {
            "a": npm("a@1.0.0", {"lodash": "^4.1.0"}),
            "a/lodash": npm("lodash@4.1.0"),
            "lodash": npm("lodash@4.0.0"),
        }
    ).replace("\n", "\r\n")
    promoted = PackageRecord.from_lockfile("a/lodash", npm("lodash@4.1.0"))
    out = rewrite_lockfile(text, HoistResult(hoisted=("a/lodash",), promotions={"lodash": promoted}))
    assert "\n" not in out.replace("\r\n", "")
    assert '    "lodash": ["lodash@4.1.0", "", {}, "sha512-x"],\r\n' in out


def test_missing_packages_marker_is_an_error():
    with pytest.raises(LockfileFormatError, match="packages"):
        rewrite_lockfile('{\n  "lockfileVersion": 1,\n}\n', HoistResult(hoisted=("a",)))


def test_unknown_hoisted_path_is_an_error():
    text = lockfile_text({"a": npm("a@1.0.0")})
    with pytest.raises(LockfileFormatError, match="not found"):
        rewrite_lockfile(text, HoistResult(hoisted=("a/b",)))
