from liftengine.coercion import to_float, to_int
from liftengine.constants import MAX_WARMUP_SETS
from liftengine.models import WarmupSet
from liftengine.predictions import round_to_nearest

# (fraction of top set, reps) per warm-up count; heavier and shorter towards the top set.
WARMUP_TEMPLATES = {
    1: [(0.6, 5)],
    2: [(0.5, 5), (0.7, 3)],
    3: [(0.4, 5), (0.6, 3), (0.75, 2)],
    4: [(0.4, 5), (0.6, 3), (0.75, 2), (0.85, 1)],
}


def plan_warmups(top_set_weight, warmup_set_count) -> list[WarmupSet]:
    """
    Warm-up ramp leading up to ``top_set_weight``.

    Counts above 4 get the 4-set ramp. No usable top set, or a count of
    zero or less, means no warm-ups.
    """
    weight = to_float(top_set_weight)
    count = to_int(warmup_set_count) or 0
    if weight is None or weight <= 0 or count <= 0:
        return []

    template = WARMUP_TEMPLATES[min(count, MAX_WARMUP_SETS)]
    return [WarmupSet(weight=round_to_nearest(weight * pct), reps=reps) for pct, reps in template]
