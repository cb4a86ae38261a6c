"""Semantic version ordering for image tags."""

import re

VERSION_PREFIX = re.compile(r"^\d+\.\d+\.\d+")


def _strip_qualifier(version: str) -> str:
    """Drop everything from the first '-' (``2.0.0-rc1`` -> ``2.0.0``)."""
    return version.split("-", 1)[0]


def parse_numeric(version: str) -> tuple[int, ...] | None:
    """Return the dotted components as integers, or None if any is not numeric."""
    parts = _strip_qualifier(version).split(".")
    if not all(part.isdecimal() for part in parts):
        return None
    return tuple(int(part) for part in parts)


def is_less_than(a: str, b: str) -> bool:
    """Strict version ordering: True only if ``a`` sorts before ``b``.

    Components are compared numerically (``1.9.0 < 1.10.0``). When either
    side has a non-numeric component the stripped strings are compared
    lexicographically instead.
    """
    left, right = parse_numeric(a), parse_numeric(b)
    if left is not None and right is not None:
        return left < right
    return _strip_qualifier(a) < _strip_qualifier(b)
