"""Parse bun.lock text into a mapping and validate its shape.

bun.lock is JSON with trailing commas. The commas are dropped before handing
the text to :mod:`json`, and the decoded document is checked against a JSON
Schema so later stages can index records without re-checking types.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from ..errors import LockfileFormatError

_DEPENDENCY_MAP = {"type": "object", "additionalProperties": {"type": "string"}}

BUN_LOCK_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["packages"],
    "properties": {
        "lockfileVersion": {"type": "integer"},
        "workspaces": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "dependencies": {"$ref": "#/$defs/dependencyMap"},
                    "devDependencies": {"$ref": "#/$defs/dependencyMap"},
                    "optionalDependencies": {"$ref": "#/$defs/dependencyMap"},
                    "peerDependencies": {"$ref": "#/$defs/dependencyMap"},
                },
            },
        },
        "packages": {
            "type": "object",
            "propertyNames": {"minLength": 1},
            "additionalProperties": {"$ref": "#/$defs/packageRecord"},
        },
    },
    "$defs": {
        "dependencyMap": _DEPENDENCY_MAP,
        "packageRecord": {
            "type": "array",
            "minItems": 1,
            "prefixItems": [{"type": "string", "minLength": 1}],
            "if": {"minItems": 4, "maxItems": 4},
            "then": {
                "prefixItems": [
                    {"type": "string", "minLength": 1},
                    {"type": "string"},
                    {
                        "type": "object",
                        "properties": {"dependencies": {"$ref": "#/$defs/dependencyMap"}},
                    },
                    {"type": "string"},
                ]
            },
        },
    },
}


def strip_trailing_commas(text: str) -> str:
    """Remove commas that directly precede a closing ``}`` or ``]``."""
    out: list[str] = []
    in_string = False
    escaped = False
    length = len(text)
    for index, char in enumerate(text):
        if in_string:
            out.append(char)
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == ",":
            ahead = index + 1
            while ahead < length and text[ahead] in " \t\r\n":
                ahead += 1
            if ahead < length and text[ahead] in "}]":
                continue
        out.append(char)
    return "".join(out)


def _format_errors(errors: Iterable) -> str:
    messages = []
    for error in errors:
        pointer = "/".join(str(p) for p in error.path)
        messages.append(f"- {pointer or '<root>'}: {error.message}")
    return "\n".join(messages)


def parse_text(text: str) -> dict[str, Any]:
    """Decode and validate lockfile text; raise LockfileFormatError on any problem."""
    try:
        data = json.loads(strip_trailing_commas(text))
    except json.JSONDecodeError as exc:
        raise LockfileFormatError(f"Invalid JSON in lockfile: {exc}") from exc

    validator = Draft202012Validator(BUN_LOCK_SCHEMA)
    errors = sorted(validator.iter_errors(data), key=lambda e: list(map(str, e.path)))
    if errors:
        raise LockfileFormatError("Lockfile failed validation:\n" + _format_errors(errors))
    return data


def read_text(path: Path) -> str:
    """Return the lockfile text exactly as stored (no newline translation)."""
    return path.read_bytes().decode("utf-8")
