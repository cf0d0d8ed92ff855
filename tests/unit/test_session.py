import unittest

from liftengine.models import ExerciseTarget
from liftengine.session import (
    NoValidSetsError,
    SetDraft,
    SetEntry,
    is_exercise_completed,
    next_split_day,
    parse_set_entries,
    rep_range_label,
    working_set_drafts,
)


class TestRepRangeLabel(unittest.TestCase):
    def test_labels(self):
        self.assertEqual(rep_range_label(ExerciseTarget(rep_range_start=6, rep_range_end=8)), "6-8")
        self.assertEqual(rep_range_label(ExerciseTarget(rep_range_start=6)), "6")
        self.assertEqual(rep_range_label(ExerciseTarget(rep_range_end=8)), "8")
        self.assertEqual(rep_range_label(ExerciseTarget()), "-")
        self.assertEqual(rep_range_label(None), "-")


class TestWorkingSetDrafts(unittest.TestCase):
    def test_one_draft_per_working_set(self):
        drafts = working_set_drafts(ExerciseTarget(rep_range_start=6, rep_range_end=8, working_set_count=3))
        self.assertEqual(drafts, [SetDraft("", "8")] * 3)

    def test_no_reps_target_leaves_reps_blank(self):
        self.assertEqual(working_set_drafts(ExerciseTarget()), [SetDraft("", "")])


class TestParseSetEntries(unittest.TestCase):
    def test_valid_rows_are_truncated_to_ints(self):
        entries = parse_set_entries([
            {"weight": "185.5", "reps": "5"},
            {"weight": 175, "reps": 8.0},
        ])
        self.assertEqual(entries, [SetEntry(185, 5), SetEntry(175, 8)])

    def test_incomplete_rows_are_dropped(self):
        entries = parse_set_entries([
            {"weight": "", "reps": "8"},
            {"weight": "185", "reps": ""},
            {"weight": "0", "reps": "5"},
            {"weight": "abc", "reps": "5"},
            "not a row",
            {"weight": "135", "reps": "10"},
        ])
        self.assertEqual(entries, [SetEntry(135, 10)])

    def test_nothing_valid_raises(self):
        with self.assertRaises(NoValidSetsError) as ctx:
            parse_set_entries([{"weight": "", "reps": ""}])
        self.assertIn("at least one working set", str(ctx.exception))
        with self.assertRaises(ValueError):
            parse_set_entries(None)


class TestProgress(unittest.TestCase):
    def test_exercise_completed(self):
        target = ExerciseTarget(working_set_count=3)
        self.assertFalse(is_exercise_completed(target, 2))
        self.assertTrue(is_exercise_completed(target, 3))
        self.assertTrue(is_exercise_completed(target, 4))
        self.assertFalse(is_exercise_completed(target, 0))

    def test_next_split_day_wraps(self):
        self.assertEqual(next_split_day(1, days_per_week=4), 2)
        self.assertEqual(next_split_day(4, days_per_week=4), 1)
        self.assertEqual(next_split_day(3, day_count=3), 1)
        self.assertEqual(next_split_day(None, days_per_week=3), 2)
        self.assertEqual(next_split_day(1), 1)


if __name__ == "__main__":
    unittest.main()
