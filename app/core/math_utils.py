"""Numeric helpers shared by the scoring and metrics modules."""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves rounding up.

    Python's built-in ``round`` uses banker's rounding (``round(2.5) == 2``);
    dashboard percentages are expected to round halves up (``2.5 -> 3``).
    """
    return int(math.floor(value + 0.5))


def round_one_decimal(value: float) -> float:
    return round_half_up(value * 10) / 10


def percentage(part: float, whole: float, *, empty: int = 0) -> int:
    """Integer percentage of ``part`` in ``whole``; ``empty`` when whole is 0."""
    if whole <= 0:
        return empty
    return round_half_up(100 * part / whole)
