"""Primitive parsers for provider score strings.

All upstream and cached scores use ``"<home> - <away>"`` with exactly one
space either side of the hyphen. Any other separator is unparseable.
"""

from __future__ import annotations

import re
from typing import Any

SCORE_SEPARATOR = " - "

_LEADING_INT = re.compile(r"^\s*\+?(\d+)")


def parse_int_prefix(value: Any) -> int:
    """Read the leading integer of a string, 0 when there is none.

    ``"12"`` → 12, ``" 7 "`` → 7, ``"145/4"`` → 145, ``"abc"`` → 0.
    Numbers pass through (floats are truncated); anything else is 0.
    """
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float):
        return max(int(value), 0) if value == value else 0
    if not isinstance(value, str):
        return 0
    m = _LEADING_INT.match(value)
    return int(m.group(1)) if m else 0


def parse_score_string(value: Any) -> tuple[int, int] | None:
    """Parse ``"H - A"`` into ``(home, away)``.

    Returns None for missing input or when the split on ``" - "`` does not
    give exactly two parts. A side that is not a number reads as 0, so a
    half-transmitted live score still renders.
    """
    if not value or not isinstance(value, str):
        return None
    parts = value.split(SCORE_SEPARATOR)
    if len(parts) != 2:
        return None
    return parse_int_prefix(parts[0]), parse_int_prefix(parts[1])


def parse_runs(value: Any) -> int:
    """Runs component of a cricket ``"runs/wickets"`` string."""
    if not isinstance(value, str):
        return 0
    return parse_int_prefix(value.split("/")[0])


def parse_cricket_score(value: Any) -> tuple[int, int]:
    """``"137/8"`` → ``(137, 8)``; missing parts read as 0."""
    if not value or not isinstance(value, str):
        return 0, 0
    parts = value.split("/")
    runs = parse_int_prefix(parts[0])
    wickets = parse_int_prefix(parts[1]) if len(parts) > 1 else 0
    return runs, wickets
