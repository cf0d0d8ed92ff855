"""
Read/write access to logged sets and exercise prescriptions.

All functions take an open psycopg2 RealDictCursor; connection handling,
commits and error reporting are left to the caller.  psycopg2.Error is not
caught here.
"""

from __future__ import annotations

import logging
from typing import Iterable

from liftengine.constants import HISTORY_WINDOW, PROGRESS_WINDOW
from liftengine.models import ExerciseTarget, LoggedSet, exercise_target_from_row, logged_sets_from_rows
from liftengine.session import SetEntry

logger = logging.getLogger(__name__)


def fetch_exercise_target(cur, exercise_id: str) -> ExerciseTarget | None:
    cur.execute(
        """
        SELECT id, name, rep_range_start, rep_range_end, rpe, warmup_sets, working_sets
        FROM split_exercises WHERE id = %s;
        """,
        (str(exercise_id),)
    )
    row = cur.fetchone()
    if not row:
        return None
    target = exercise_target_from_row(row)
    if target is None:
        logger.warning(f"Exercise {exercise_id} has an unusable prescription; treating as unconfigured.")
        return ExerciseTarget(exercise_id=str(row.get('id', exercise_id)), name=row.get('name'))
    return target


def fetch_logged_sets(cur, user_id: str, exercise_id: str, limit: int = HISTORY_WINDOW) -> list[LoggedSet]:
    """
    Heaviest ``limit`` sets the user logged for the exercise.
    Order is irrelevant to the estimator; it only bounds the window.
    """
    cur.execute(
        """
        SELECT weight, reps, created_at
        FROM logged_sets
        WHERE user_id = %s AND exercise_id = %s
        ORDER BY weight DESC
        LIMIT %s;
        """,
        (str(user_id), str(exercise_id), limit)
    )
    rows = cur.fetchall()
    sets = logged_sets_from_rows(rows)
    if len(sets) != len(rows):
        logger.info(f"Ignored {len(rows) - len(sets)} malformed history rows for user {user_id}, exercise {exercise_id}.")
    return sets


def count_logged_sets(cur, user_id: str, exercise_id: str, session_id: str) -> int:
    cur.execute(
        """
        SELECT COUNT(*) AS logged
        FROM logged_sets
        WHERE user_id = %s AND exercise_id = %s AND session_id = %s;
        """,
        (str(user_id), str(exercise_id), str(session_id))
    )
    row = cur.fetchone()
    return int(row['logged']) if row and row['logged'] is not None else 0


def insert_logged_sets(cur, user_id: str, exercise_id: str, entries: Iterable[SetEntry], session_id: str | None = None) -> int:
    """Insert the entries as new logged sets. Returns the number of rows written."""
    written = 0
    for entry in entries:
        cur.execute(
            """
            INSERT INTO logged_sets (user_id, exercise_id, session_id, weight, reps, created_at)
            VALUES (%s, %s, %s, %s, %s, NOW());
            """,
            (str(user_id), str(exercise_id), str(session_id) if session_id else None, entry.weight, entry.reps)
        )
        written += 1
    return written


def fetch_logged_set_history(cur, user_id: str, exercise_id: str, limit: int = PROGRESS_WINDOW) -> list[LoggedSet]:
    """Up to ``limit`` of the user's sets for the exercise, oldest first."""
    cur.execute(
        """
        SELECT weight, reps, created_at
        FROM logged_sets
        WHERE user_id = %s AND exercise_id = %s
        ORDER BY created_at ASC
        LIMIT %s;
        """,
        (str(user_id), str(exercise_id), limit)
    )
    return logged_sets_from_rows(cur.fetchall())


def complete_session(cur, user_id: str, session_id: str) -> bool:
    """Mark an open session as completed. False when the user has no such open session."""
    cur.execute(
        """
        UPDATE sessions SET completed_at = NOW()
        WHERE id = %s AND user_id = %s AND completed_at IS NULL;
        """,
        (str(session_id), str(user_id))
    )
    return cur.rowcount > 0


def fetch_split_progress(cur, user_id: str) -> dict | None:
    """The user's current split day and the size of their active split."""
    cur.execute(
        """
        SELECT ui.current_day, s.days_per_week,
               (SELECT COUNT(*) FROM split_days d WHERE d.split = ui.active_split) AS day_count
        FROM user_info ui
        LEFT JOIN splits s ON s.id = ui.active_split
        WHERE ui.user_id = %s;
        """,
        (str(user_id),)
    )
    return cur.fetchone()


def set_current_day(cur, user_id: str, day: int) -> None:
    cur.execute(
        "UPDATE user_info SET current_day = %s WHERE user_id = %s;",
        (day, str(user_id))
    )
