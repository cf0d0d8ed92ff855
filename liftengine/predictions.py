# Epley formula for 1RM estimation
# Formula: 1RM = w * (1 + (r / 30))
# Roughly linear up to ~12 reps, increasingly optimistic beyond that.
# Reps are not clamped, so very high rep sets give unreliable estimates.
# Invalid input never raises: history rows and half-typed form values
# simply produce no estimate.

import math
from datetime import date
from typing import Iterable

from liftengine.coercion import to_float
from liftengine.constants import DEFAULT_LOAD_INCREMENT
from liftengine.models import LoggedSet, MaxEstimate


def estimate_max(weight, reps) -> float | None:
    """
    Estimated one-rep max for ``weight`` lifted for ``reps`` repetitions.
    Returns None unless both values are finite and positive.
    """
    w = to_float(weight)
    r = to_float(reps)
    if w is None or r is None or w <= 0 or r <= 0:
        return None
    estimated = w * (1 + r / 30.0)
    # Huge but finite weights can overflow
    if not math.isfinite(estimated):
        return None
    return estimated


def best_estimate(sets: Iterable[LoggedSet]) -> MaxEstimate:
    """
    Highest estimated max across ``sets``. The first set wins ties.
    An empty or all-invalid history gives an estimate of None, which means
    "insufficient history", not zero.
    """
    best = MaxEstimate()
    for logged in sets or []:
        value = estimate_max(logged.weight, logged.reps)
        if value is None:
            continue
        if best.estimated_max is None or value > best.estimated_max:
            best = MaxEstimate(
                estimated_max=value,
                source_weight=logged.weight,
                source_reps=logged.reps,
            )
    return best


def best_estimate_by_date(sets: Iterable[LoggedSet]) -> list[tuple[date, MaxEstimate]]:
    """
    Best estimated max per training day, oldest day first.
    Sets without a recorded date, or without an estimate, are skipped.
    """
    by_day = {}
    for logged in sets or []:
        if logged.recorded_at is None:
            continue
        by_day.setdefault(logged.recorded_at.date(), []).append(logged)

    progress = []
    for day in sorted(by_day):
        best = best_estimate(by_day[day])
        if best.estimated_max is not None:
            progress.append((day, best))
    return progress


def round_to_nearest(value, increment: float = DEFAULT_LOAD_INCREMENT) -> float | None:
    """
    Round to the nearest multiple of ``increment``, halves rounding up.
    Python's round() would send 82.5 to 80; lifters expect 85.
    """
    number = to_float(value)
    if number is None or not increment or increment <= 0:
        return None
    return math.floor(number / increment + 0.5) * increment


__all__ = [
    "estimate_max",
    "best_estimate",
    "best_estimate_by_date",
    "round_to_nearest",
]
