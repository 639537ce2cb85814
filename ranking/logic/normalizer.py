"""
Normalizer

Pure numeric helpers shared by every scorer, plus UTC coercion for the
timestamps the scorers compare.
"""

from datetime import datetime, timezone


def clamp(value: float, min_value: float, max_value: float) -> float:
    """
    Bound value to [min_value, max_value].

    An inverted range (min_value > max_value) returns min_value.
    """
    if min_value > max_value:
        return min_value
    return min(max_value, max(min_value, value))


def rescale(value: float, min_value: float, max_value: float) -> float:
    """
    Linear min-max normalization.

    A degenerate range (max_value == min_value) yields 0 rather than
    dividing by zero.
    """
    if max_value == min_value:
        return 0.0
    return (value - min_value) / (max_value - min_value)


def as_utc(moment: datetime) -> datetime:
    """Return an aware UTC datetime; naive values are taken to be UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)
