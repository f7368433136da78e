"""Tests for shift set validation and the change-set diff."""

import itertools
from datetime import time

import pytest

from pilgrim.core.errors import ValidationError
from pilgrim.services.shift_definition import ShiftDefinition, validate_shift_set
from pilgrim.services.shift_diff import ChangeSet, diff


def s(day: int, start: str, end: str) -> ShiftDefinition:
    return ShiftDefinition.of(day, start, end)


MON_8_12 = s(1, "08:00", "12:00")
MON_9_13 = s(1, "09:00", "13:00")
TUE_14_16 = s(2, "14:00", "16:00")
SUN_7_11 = s(0, "07:00", "11:00")
FRI_13_17 = s(5, "13:00", "17:00")


class TestShiftDefinition:
    def test_of_parses_strings(self) -> None:
        assert MON_8_12 == ShiftDefinition(1, time(8, 0), time(12, 0))
        assert str(MON_8_12) == "Mon 08:00-12:00"

    def test_start_must_precede_end(self) -> None:
        with pytest.raises(ValidationError):
            s(1, "12:00", "12:00")
        with pytest.raises(ValidationError):
            s(1, "13:00", "12:00")

    def test_bad_time_string(self) -> None:
        with pytest.raises(ValidationError):
            s(1, "8am", "12:00")

    def test_sunday_sorts_last_in_week(self) -> None:
        assert SUN_7_11.week_order == 6
        assert MON_8_12.week_order == 0

    def test_overlaps_only_on_same_day(self) -> None:
        assert MON_8_12.overlaps(MON_9_13)
        assert not MON_8_12.overlaps(s(1, "12:00", "14:00"))
        assert not MON_8_12.overlaps(s(2, "08:00", "12:00"))


class TestValidateShiftSet:
    def test_sorted_monday_first(self) -> None:
        out = validate_shift_set([SUN_7_11, TUE_14_16, MON_8_12])
        assert out == [MON_8_12, TUE_14_16, SUN_7_11]

    def test_accepts_dicts(self) -> None:
        out = validate_shift_set([{"day_of_week": 1, "start_time": "08:00", "end_time": "12:00"}])
        assert out == [MON_8_12]

    def test_empty_rejected(self) -> None:
        with pytest.raises(ValidationError, match="At least one shift"):
            validate_shift_set([])

    def test_overlap_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Overlapping"):
            validate_shift_set([MON_8_12, MON_9_13])

    def test_second_shift_same_day_rejected(self) -> None:
        with pytest.raises(ValidationError, match="one shift per day"):
            validate_shift_set([MON_8_12, s(1, "14:00", "16:00")])


class TestDiff:
    def test_monday_change_scenario(self) -> None:
        changes = diff([MON_8_12], [MON_9_13, TUE_14_16])
        assert changes.modified == frozenset({(MON_8_12, MON_9_13)})
        assert changes.added == frozenset({TUE_14_16})
        assert changes.removed == frozenset()

    def test_identical_sets_are_empty(self) -> None:
        changes = diff([MON_8_12, SUN_7_11], [SUN_7_11, MON_8_12])
        assert changes.is_empty
        assert changes.summary() == "no changes"

    def test_removed_day(self) -> None:
        changes = diff([MON_8_12, FRI_13_17], [MON_8_12])
        assert changes.removed == frozenset({FRI_13_17})
        assert not changes.added and not changes.modified

    def test_duplicate_days_rejected(self) -> None:
        with pytest.raises(ValidationError):
            diff([MON_8_12, s(1, "14:00", "16:00")], [])
        with pytest.raises(ValidationError):
            diff([], [MON_8_12, MON_9_13])

    def test_symmetry(self) -> None:
        sets = [
            [],
            [MON_8_12],
            [MON_9_13, TUE_14_16],
            [SUN_7_11, FRI_13_17, MON_8_12],
        ]
        for a, b in itertools.product(sets, repeat=2):
            ab, ba = diff(a, b), diff(b, a)
            assert ab.added == ba.removed
            assert ab.removed == ba.added
            assert {(n, o) for o, n in ab.modified} == set(ba.modified)

    def test_completeness(self) -> None:
        current = [MON_8_12, FRI_13_17, SUN_7_11]
        proposed = [MON_9_13, TUE_14_16, SUN_7_11]
        changes = diff(current, proposed)

        added_days = {x.day_of_week for x in changes.added}
        removed_days = {x.day_of_week for x in changes.removed}
        modified_days = {o.day_of_week for o, _ in changes.modified}

        assert added_days == {2}
        assert removed_days == {5}
        assert modified_days == {1}
        # unchanged Sunday appears nowhere, and no day is in two buckets
        assert not (added_days & removed_days or added_days & modified_days or removed_days & modified_days)
        assert 0 not in added_days | removed_days | modified_days


class TestSnapshot:
    def test_rows_monday_first(self) -> None:
        rows = diff([MON_8_12, SUN_7_11], [MON_9_13, TUE_14_16]).to_snapshot()
        assert [r["day_of_week"] for r in rows] == [1, 2, 0]
        assert rows[0] == {
            "day_of_week": 1,
            "old": {"start_time": "08:00:00", "end_time": "12:00:00"},
            "new": {"start_time": "09:00:00", "end_time": "13:00:00"},
            "is_changed": True,
            "is_new": False,
            "is_removed": False,
        }
        assert rows[1]["is_new"] and rows[1]["old"] is None
        assert rows[2]["is_removed"] and rows[2]["new"] is None

    def test_rehydrates(self) -> None:
        changes = diff([MON_8_12, SUN_7_11], [MON_9_13, TUE_14_16])
        assert ChangeSet.from_snapshot(changes.to_snapshot()) == changes

    def test_summary(self) -> None:
        changes = diff([MON_8_12], [MON_9_13, TUE_14_16])
        assert changes.summary() == "+Tue 14:00-16:00, ~Mon 08:00-12:00 -> Mon 09:00-13:00"
