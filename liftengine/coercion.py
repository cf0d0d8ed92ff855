"""Lenient numeric coercion for values typed into forms or read from loosely-typed rows."""

import math


def to_float(value) -> float | None:
    """Return ``value`` as a finite float, or None if it is not one."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def to_int(value) -> int | None:
    """Return ``value`` truncated toward zero, or None if it is not a finite number."""
    number = to_float(value)
    if number is None:
        return None
    return int(number)
