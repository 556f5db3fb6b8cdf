"""Literal parsers for shorthand predicate values."""

from __future__ import annotations

import re

# Longest suffix first so "KB" is not read as "K" followed by a stray "B".
SIZE_SUFFIXES: tuple[tuple[str, int], ...] = (
    ("KB", 1024),
    ("MB", 1024**2),
    ("GB", 1024**3),
    ("K", 1024),
    ("M", 1024**2),
    ("G", 1024**3),
    ("B", 1),
)

SIZE_OPERATORS = (">", "<")

_INTEGER = re.compile(r"[+-]?\d+")


def parse_size(text: str) -> int:
    """Convert a human size such as ``10K``, ``2mb`` or ``512`` to bytes.

    Suffixes are powers of 1024. Anything that is not a whole number once
    the suffix is stripped (``1.5K`` included) yields ``0``.
    """
    literal = text.strip().upper()
    multiplier = 1
    for suffix, factor in SIZE_SUFFIXES:
        if literal.endswith(suffix):
            literal = literal[: -len(suffix)]
            multiplier = factor
            break
    if not _INTEGER.fullmatch(literal):
        return 0
    return int(literal) * multiplier


def parse_size_predicate(text: str) -> tuple[str, int]:
    """Split ``>1G`` / ``<500K`` / ``10M`` into ``(operator, bytes)``.

    The operator defaults to ``>`` when none is given.
    """
    literal = text.strip()
    operator = ">"
    if literal[:1] in SIZE_OPERATORS:
        operator = literal[0]
        literal = literal[1:]
    return operator, parse_size(literal)


def parse_relative_days(text: str) -> int | None:
    """Parse a day offset such as ``7``; return ``None`` if it is not an integer."""
    if not _INTEGER.fullmatch(text):
        return None
    return int(text)
