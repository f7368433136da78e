"""Tests for week-anchor date resolution."""

from datetime import date, datetime, time, timedelta, timezone

import pytest

from pilgrim.core.errors import ValidationError
from pilgrim.services.schedule_resolver import (
    is_today,
    local_date,
    occurrences_between,
    resolve_occurrence,
    week_dates,
    week_start_for,
)
from pilgrim.services.shift_definition import ShiftDefinition

MONDAY = date(2024, 6, 3)


class TestResolveOccurrence:
    def test_sunday_is_last_day_of_week(self) -> None:
        assert resolve_occurrence(MONDAY, 0) == date(2024, 6, 9)

    def test_monday_is_anchor(self) -> None:
        assert resolve_occurrence(MONDAY, 1) == MONDAY

    def test_saturday(self) -> None:
        assert resolve_occurrence(MONDAY, 6) == MONDAY + timedelta(days=5)

    def test_every_day_stays_inside_the_week(self) -> None:
        days = {resolve_occurrence(MONDAY, d) for d in range(7)}
        assert days == set(week_dates(MONDAY))

    @pytest.mark.parametrize("anchor", [date(2024, 6, 4), date(2024, 6, 9)])
    def test_non_monday_anchor_rejected(self, anchor: date) -> None:
        with pytest.raises(ValidationError):
            resolve_occurrence(anchor, 1)

    def test_datetime_anchor_rejected(self) -> None:
        with pytest.raises(ValidationError):
            resolve_occurrence(datetime(2024, 6, 3, 8, 0), 1)

    @pytest.mark.parametrize("day", [-1, 7, True, "1", None])
    def test_bad_day_of_week_rejected(self, day) -> None:
        with pytest.raises(ValidationError):
            resolve_occurrence(MONDAY, day)


class TestIsToday:
    def test_naive_now_is_local(self) -> None:
        assert is_today(MONDAY, 3, datetime(2024, 6, 5, 23, 59))
        assert not is_today(MONDAY, 3, datetime(2024, 6, 6, 0, 1))

    def test_aware_now_is_converted_to_configured_zone(self) -> None:
        # 2024-06-04 20:00 UTC is already Wednesday 03:00 in Ho Chi Minh City
        now = datetime(2024, 6, 4, 20, 0, tzinfo=timezone.utc)
        assert is_today(MONDAY, 3, now)
        assert not is_today(MONDAY, 2, now)

    def test_explicit_timezone(self) -> None:
        now = datetime(2024, 6, 4, 20, 0, tzinfo=timezone.utc)
        assert is_today(MONDAY, 2, now, tz="UTC")

    def test_other_week_is_never_today(self) -> None:
        assert not is_today(MONDAY, 3, datetime(2024, 6, 12, 9, 0))


class TestWeekHelpers:
    def test_week_start_for(self) -> None:
        assert week_start_for(date(2024, 6, 9)) == MONDAY
        assert week_start_for(date(2024, 6, 3)) == MONDAY
        assert week_start_for(datetime(2024, 6, 6, 15, 0)) == MONDAY

    def test_local_date(self) -> None:
        assert local_date(datetime(2024, 6, 5, 18, 0, tzinfo=timezone.utc)) == date(2024, 6, 6)
        assert local_date(datetime(2024, 6, 5, 18, 0)) == date(2024, 6, 5)

    def test_week_dates(self) -> None:
        dates = week_dates(MONDAY)
        assert dates[0] == MONDAY
        assert dates[-1] == date(2024, 6, 9)


class TestOccurrencesBetween:
    shifts = [
        ShiftDefinition(0, time(7, 0), time(11, 0)),
        ShiftDefinition(1, time(8, 0), time(12, 0)),
    ]

    def test_recurs_weekly(self) -> None:
        occ = list(occurrences_between(MONDAY, self.shifts, date(2024, 6, 3), date(2024, 6, 17)))
        assert [o.date for o in occ] == [
            date(2024, 6, 3),
            date(2024, 6, 9),
            date(2024, 6, 10),
            date(2024, 6, 16),
            date(2024, 6, 17),
        ]

    def test_nothing_before_anchor(self) -> None:
        occ = list(occurrences_between(MONDAY, self.shifts, date(2024, 5, 20), date(2024, 6, 3)))
        assert [o.date for o in occ] == [date(2024, 6, 3)]

    def test_range_mid_week(self) -> None:
        occ = list(occurrences_between(MONDAY, self.shifts, date(2024, 6, 12), date(2024, 6, 16)))
        assert [(o.date, o.shift.day_of_week) for o in occ] == [(date(2024, 6, 16), 0)]

    def test_reversed_range_rejected(self) -> None:
        with pytest.raises(ValidationError):
            list(occurrences_between(MONDAY, self.shifts, date(2024, 6, 10), date(2024, 6, 3)))
