"""bun-lock-dedupe core package.

This package provides the lockfile dedupe pipeline used by the
``bun-lock-dedupe`` command and by ``scripts/dedupe.py``.
"""

__all__ = [
    "core",
]
