"""Installation path codec.

A bun.lock installation path is a ``/``-joined list of package names, e.g.
``"a/@types/node/undici-types"``. Scoped names contain a ``/`` of their own, so
a segment starting with ``@`` always absorbs the segment that follows it.
"""

from __future__ import annotations

from collections.abc import Sequence

from .errors import MalformedPathError


def decode(path: str) -> list[str]:
    """Split ``path`` into package-name segments, keeping scoped names whole."""
    segments: list[str] = []
    in_scope = False
    for part in path.split("/"):
        if not part:
            raise MalformedPathError(f"Empty segment in installation path: {path!r}")
        if in_scope:
            segments[-1] += f"/{part}"
            in_scope = False
        else:
            segments.append(part)
            in_scope = part.startswith("@")
    if in_scope:
        raise MalformedPathError(f"Scope without package name in installation path: {path!r}")
    return segments


def encode(segments: Sequence[str]) -> str:
    return "/".join(segments)


def is_within(path: str, ancestor: str) -> bool:
    """True when ``path`` is ``ancestor`` itself or installed somewhere below it."""
    return path == ancestor or path.startswith(f"{ancestor}/")
