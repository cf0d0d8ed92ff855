"""Percent-of-max lookup by perceived effort (RPE) and target reps."""

from liftengine.coercion import to_int
from liftengine.constants import MAX_TABLE_REPS

# Fraction of 1RM that can be lifted for N reps at a given RPE.
# Exact hits only; there is no interpolation between rep counts.
RPE_PERCENT_OF_MAX = {
    10: {1: 1.0, 2: 0.955, 3: 0.922, 4: 0.892, 5: 0.863, 6: 0.837, 7: 0.811, 8: 0.786, 9: 0.762, 10: 0.739, 11: 0.716, 12: 0.694},
    9: {1: 0.955, 2: 0.922, 3: 0.892, 4: 0.863, 5: 0.837, 6: 0.811, 7: 0.786, 8: 0.762, 9: 0.739, 10: 0.716, 11: 0.694, 12: 0.672},
    8: {1: 0.922, 2: 0.892, 3: 0.863, 4: 0.837, 5: 0.811, 6: 0.786, 7: 0.762, 8: 0.739, 9: 0.716, 10: 0.694, 11: 0.672, 12: 0.651},
    7: {1: 0.892, 2: 0.863, 3: 0.837, 4: 0.811, 5: 0.786, 6: 0.762, 7: 0.739, 8: 0.716, 9: 0.694, 10: 0.672, 11: 0.651, 12: 0.63},
    6: {1: 0.863, 2: 0.837, 3: 0.811, 4: 0.786, 5: 0.762, 6: 0.739, 7: 0.716, 8: 0.694, 9: 0.672, 10: 0.651, 11: 0.63, 12: 0.61},
}


def percent_of_max(effort_level, target_reps) -> float | None:
    """
    Fraction of estimated max for ``target_reps`` at ``effort_level``.

    Effort outside 6-10 and reps below 1 give None. Reps above 12 use the
    12-rep column as a conservative floor.
    """
    effort = to_int(effort_level)
    reps = to_int(target_reps)
    if effort is None or reps is None:
        return None

    row = RPE_PERCENT_OF_MAX.get(effort)
    if row is None or reps < 1:
        return None
    if reps > MAX_TABLE_REPS:
        return row[MAX_TABLE_REPS]
    return row.get(reps)
