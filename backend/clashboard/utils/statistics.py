"""Statistical utility functions for safe calculations."""

import math


def safe_percentage(part: float, whole: float, default: float = 0.0) -> float:
    """
    Percentage of ``part`` in ``whole`` (0-100), or default for an empty whole.

    Args:
        part: Counted items
        whole: Total items
        default: Value to return if whole is zero

    Returns:
        Percentage value or default value
    """
    return part / whole * 100 if whole > 0 else default


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with halves rounded up.

    Python's built-in round() uses banker's rounding, which would turn a
    62.5% win rate into 62 instead of 63.

    Args:
        value: Number to round

    Returns:
        Rounded integer
    """
    return int(math.floor(value + 0.5))
