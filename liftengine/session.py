"""Helpers for the set-logging flow around a recommendation: draft rows, entry parsing, day rotation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from liftengine.coercion import to_int
from liftengine.constants import DEFAULT_WORKING_SETS
from liftengine.models import ExerciseTarget
from liftengine.recommendation import reps_target_from_range


class NoValidSetsError(ValueError):
    """Raised when a submission contains no row with both weight and reps."""

    def __init__(self, message: str = "Enter weight and reps for at least one working set."):
        super().__init__(message)


@dataclass(frozen=True)
class SetDraft:
    """An editable working-set row as the form shows it (strings, possibly empty)."""
    weight: str = ""
    reps: str = ""


@dataclass(frozen=True)
class SetEntry:
    weight: int
    reps: int


def rep_range_label(target: ExerciseTarget | None) -> str:
    if target is None:
        return "-"
    start, end = target.rep_range_start, target.rep_range_end
    if start and end:
        return f"{start}-{end}"
    if start:
        return str(start)
    if end:
        return str(end)
    return "-"


def working_set_drafts(target: ExerciseTarget) -> list[SetDraft]:
    """One blank draft per working set, reps pre-filled with the reps target."""
    count = max(target.working_set_count or DEFAULT_WORKING_SETS, 1)
    reps = reps_target_from_range(target)
    return [SetDraft(weight="", reps=str(reps) if reps else "") for _ in range(count)]


def parse_set_entries(entries: Iterable[Mapping[str, Any]] | None) -> list[SetEntry]:
    """
    Convert submitted weight/reps rows to whole-number entries.

    Rows missing either value, or with a zero or unparseable one, are
    dropped. Raises NoValidSetsError if nothing is left.
    """
    parsed = []
    for entry in entries or []:
        if not isinstance(entry, Mapping):
            continue
        weight = to_int(entry.get("weight"))
        reps = to_int(entry.get("reps"))
        if not weight or not reps or weight < 0 or reps < 0:
            continue
        parsed.append(SetEntry(weight=weight, reps=reps))

    if not parsed:
        raise NoValidSetsError()
    return parsed


def is_exercise_completed(target: ExerciseTarget, logged_count: int) -> bool:
    needed = target.working_set_count or DEFAULT_WORKING_SETS
    return (logged_count or 0) >= needed


def next_split_day(current_day, days_per_week=None, day_count: int = 0) -> int:
    """
    Day number that follows ``current_day`` in a split, wrapping back to 1.

    The split's ``days_per_week`` wins; without it the number of configured
    days is used.
    """
    max_days = to_int(days_per_week) or day_count or 1
    current = to_int(current_day) or 1
    return 1 if current >= max_days else current + 1
