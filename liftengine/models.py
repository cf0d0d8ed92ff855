"""Typed value objects for the recommendation engine and the row mappers that build them.

Rows coming from the history store are loosely typed (numbers may arrive as
strings, columns may be missing).  The ``*_from_row`` functions are the only
place such rows are accepted; everything past them works on the frozen
dataclasses below.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, time
from typing import Any, Iterable, Mapping

from liftengine.coercion import to_float, to_int
from liftengine.constants import DEFAULT_WORKING_SETS, MAX_EFFORT_LEVEL, MIN_EFFORT_LEVEL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoggedSet:
    """One completed set from the lifter's history."""

    weight: float
    reps: int
    recorded_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "weight": self.weight,
            "reps": self.reps,
            "recorded_at": self.recorded_at.isoformat() if self.recorded_at else None,
        }


@dataclass(frozen=True)
class ExerciseTarget:
    """Per-exercise prescription authored by the user."""

    rep_range_start: int | None = None
    rep_range_end: int | None = None
    target_effort: int | None = None
    warmup_set_count: int = 0
    working_set_count: int = DEFAULT_WORKING_SETS
    exercise_id: str | None = None
    name: str | None = None

    def __post_init__(self):
        for bound in (self.rep_range_start, self.rep_range_end):
            if bound is not None and bound < 1:
                raise ValueError(f"Rep range bounds must be positive, got {bound}.")
        if (
            self.rep_range_start is not None
            and self.rep_range_end is not None
            and self.rep_range_start > self.rep_range_end
        ):
            raise ValueError(
                f"Rep range start {self.rep_range_start} is above end {self.rep_range_end}."
            )
        if self.target_effort is not None and not (
            MIN_EFFORT_LEVEL <= self.target_effort <= MAX_EFFORT_LEVEL
        ):
            raise ValueError(
                f"Target effort must be between {MIN_EFFORT_LEVEL} and {MAX_EFFORT_LEVEL}, got {self.target_effort}."
            )
        if self.warmup_set_count < 0:
            raise ValueError("Warm-up set count cannot be negative.")
        if self.working_set_count < 1:
            raise ValueError("Working set count must be at least 1.")


@dataclass(frozen=True)
class MaxEstimate:
    """Best estimated one-rep max and the set it came from."""

    estimated_max: float | None = None
    source_weight: float | None = None
    source_reps: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class WarmupSet:
    weight: float | None
    reps: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LoadPrescription:
    """Working-set load suggested by the policy; ``working_set_load`` None means "cannot recommend"."""

    working_set_load: float | None = None
    effort_fraction: float | None = None


@dataclass(frozen=True)
class Recommendation:
    working_set_load: float | None = None
    reps_target: int | None = None
    effort_fraction: float | None = None
    warmup_sets: tuple[WarmupSet, ...] = field(default_factory=tuple)
    estimated_max: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "working_set_load": self.working_set_load,
            "reps_target": self.reps_target,
            "effort_fraction": self.effort_fraction,
            "warmup_sets": [w.to_dict() for w in self.warmup_sets],
            "estimated_max": self.estimated_max,
        }


# --- Row mappers ---

def _parse_timestamp(value) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str) and value:
        try:
            # Python < 3.11 does not accept a trailing "Z".
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


def logged_set_from_row(row: Mapping[str, Any]) -> LoggedSet | None:
    """Map a history row to a LoggedSet, or None when the row cannot be used."""
    if not isinstance(row, Mapping):
        logger.debug("Skipping history row of type %s", type(row).__name__)
        return None

    weight = to_float(row.get("weight"))
    reps = to_int(row.get("reps"))
    if weight is None or weight <= 0 or reps is None or reps <= 0:
        logger.debug("Skipping history row with weight=%r reps=%r", row.get("weight"), row.get("reps"))
        return None

    recorded = row.get("created_at", row.get("recorded_at"))
    return LoggedSet(weight=weight, reps=reps, recorded_at=_parse_timestamp(recorded))


def logged_sets_from_rows(rows: Iterable[Mapping[str, Any]] | None) -> list[LoggedSet]:
    sets = []
    for row in rows or []:
        logged = logged_set_from_row(row)
        if logged is not None:
            sets.append(logged)
    return sets


def _positive_int_or_none(value) -> int | None:
    number = to_int(value)
    if number is None or number < 1:
        return None
    return number


def exercise_target_from_row(row: Mapping[str, Any] | None) -> ExerciseTarget | None:
    """
    Map an exercise prescription row to an ExerciseTarget.

    Individual fields that are unusable fall back to "absent" (or the
    warm-up / working-set defaults).  A row whose rep range is inverted
    cannot be repaired and is rejected.
    """
    if not isinstance(row, Mapping):
        return None

    effort = to_int(row.get("rpe", row.get("target_effort")))
    if effort is not None and not (MIN_EFFORT_LEVEL <= effort <= MAX_EFFORT_LEVEL):
        effort = None

    warmups = to_int(row.get("warmup_sets")) or 0
    working = to_int(row.get("working_sets")) or DEFAULT_WORKING_SETS

    exercise_id = row.get("id", row.get("exercise_id"))
    try:
        return ExerciseTarget(
            rep_range_start=_positive_int_or_none(row.get("rep_range_start")),
            rep_range_end=_positive_int_or_none(row.get("rep_range_end")),
            target_effort=effort,
            warmup_set_count=max(0, warmups),
            working_set_count=max(DEFAULT_WORKING_SETS, working),
            exercise_id=str(exercise_id) if exercise_id is not None else None,
            name=row.get("name"),
        )
    except ValueError as e:
        logger.debug("Rejecting exercise row %s: %s", exercise_id, e)
        return None
