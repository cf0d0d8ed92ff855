"""Working-set recommendation: best e1RM -> reps target -> percent of max -> rounded load -> warm-ups."""

from __future__ import annotations

from typing import Iterable

from liftengine.coercion import to_float, to_int
from liftengine.effort_table import percent_of_max
from liftengine.models import ExerciseTarget, LoadPrescription, LoggedSet, MaxEstimate, Recommendation
from liftengine.predictions import best_estimate, round_to_nearest
from liftengine.warmups import plan_warmups


def reps_target_from_range(target: ExerciseTarget | None) -> int | None:
    """
    Reps to prescribe for a rep range: the upper bound when set, else the lower bound.

    Biased towards the harder end of the range. A lower-bound or midpoint
    policy would also be defensible; this matches how the tracker has
    always prescribed.
    """
    if target is None:
        return None
    for bound in (target.rep_range_end, target.rep_range_start):
        if bound is not None and bound > 0:
            return bound
    return None


def recommend(max_estimate, reps_target, effort_target) -> LoadPrescription:
    """
    Suggested working-set load for ``reps_target`` reps at ``effort_target`` RPE.

    A load of None means there is not enough information to recommend; it
    must never be shown as zero. The effort fraction is returned either way.
    """
    effort_fraction = percent_of_max(effort_target, reps_target)

    estimate = to_float(max_estimate)
    reps = to_int(reps_target)
    if estimate is None or estimate <= 0 or reps is None or reps <= 0 or effort_fraction is None:
        return LoadPrescription(working_set_load=None, effort_fraction=effort_fraction)

    return LoadPrescription(
        working_set_load=round_to_nearest(estimate * effort_fraction),
        effort_fraction=effort_fraction,
    )


def build_recommendation(
    history: Iterable[LoggedSet] | None,
    target: ExerciseTarget | None,
    best: MaxEstimate | None = None,
) -> Recommendation:
    """
    Full recommendation for one exercise from its logged history and prescription.
    Callers that already computed the best estimate can pass it as ``best``.
    """
    if target is None:
        return Recommendation()

    if best is None:
        best = best_estimate(history or [])
    reps = reps_target_from_range(target)
    prescription = recommend(best.estimated_max, reps, target.target_effort)
    warmups = plan_warmups(prescription.working_set_load, target.warmup_set_count)

    return Recommendation(
        working_set_load=prescription.working_set_load,
        reps_target=reps,
        effort_fraction=prescription.effort_fraction,
        warmup_sets=tuple(warmups),
        estimated_max=best.estimated_max,
    )
