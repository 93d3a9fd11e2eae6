"""Timestamp parsing shared by the VTT and ASS parsers."""
from __future__ import annotations

import math


def parse_time(value: str) -> float:
    """Parse ``HH:MM:SS.mmm`` or ``MM:SS.mmm`` into seconds.

    Any other number of ``:``-separated parts yields ``0``. Non-numeric parts
    yield ``NaN`` instead of raising; callers decide whether to reject it.
    """
    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        return 0.0
    try:
        numbers = [float(part) for part in parts]
    except ValueError:
        return math.nan

    if len(numbers) == 3:
        hours, minutes, seconds = numbers
        return hours * 3600 + minutes * 60 + seconds
    minutes, seconds = numbers
    return minutes * 60 + seconds


def is_valid_time(seconds: float) -> bool:
    return math.isfinite(seconds)
