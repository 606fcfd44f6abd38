"""Lockfile and version-range parsers."""
