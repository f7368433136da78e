"""Turn (week_start_date, day_of_week) pairs into calendar dates.

Every place that needs "which date does this shift fall on" goes through
resolve_occurrence. week_start_date is always a Monday; day_of_week uses
0=Sunday .. 6=Saturday, so Sunday is the last day of the anchored week.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, Iterator
from zoneinfo import ZoneInfo

from pilgrim.core.config import settings
from pilgrim.core.errors import ValidationError
from pilgrim.services.shift_definition import ShiftDefinition, check_day_of_week


def check_week_start(week_start_date: date) -> date:
    if isinstance(week_start_date, datetime) or not isinstance(week_start_date, date):
        raise ValidationError("week_start_date must be a date", details={"week_start_date": str(week_start_date)})
    if week_start_date.weekday() != 0:
        raise ValidationError(
            "week_start_date must be a Monday",
            details={"week_start_date": week_start_date.isoformat()},
        )
    return week_start_date


def resolve_occurrence(week_start_date: date, day_of_week: int) -> date:
    check_week_start(week_start_date)
    dow = check_day_of_week(day_of_week)
    offset = 6 if dow == 0 else dow - 1
    return week_start_date + timedelta(days=offset)


def _as_tz(tz: tzinfo | str | None) -> tzinfo:
    if tz is None:
        return settings.tzinfo()
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def local_date(now: datetime, tz: tzinfo | str | None = None) -> date:
    """Calendar date of `now` in the configured timezone.

    Naive datetimes are taken as already local.
    """
    if now.tzinfo is None:
        return now.date()
    return now.astimezone(_as_tz(tz)).date()


def is_today(week_start_date: date, day_of_week: int, now: datetime, tz: tzinfo | str | None = None) -> bool:
    return resolve_occurrence(week_start_date, day_of_week) == local_date(now, tz)


def week_start_for(d: date) -> date:
    """Monday of the week containing `d`."""
    if isinstance(d, datetime):
        d = d.date()
    return d - timedelta(days=d.weekday())


def week_dates(week_start_date: date) -> list[date]:
    check_week_start(week_start_date)
    return [week_start_date + timedelta(days=i) for i in range(7)]


@dataclass(frozen=True)
class Occurrence:
    date: date
    shift: ShiftDefinition


def occurrences_between(
    week_start_date: date,
    shifts: Iterable[ShiftDefinition],
    date_from: date,
    date_to: date,
) -> Iterator[Occurrence]:
    """Expand a recurring weekly schedule into dated occurrences.

    The schedule repeats every week starting at its anchor; nothing is produced
    before week_start_date. Results are ordered by date, then start time.
    """
    check_week_start(week_start_date)
    if date_to < date_from:
        raise ValidationError(
            "date_to must not be before date_from",
            details={"date_from": date_from.isoformat(), "date_to": date_to.isoformat()},
        )

    ordered = sorted(shifts, key=lambda s: (s.week_order, s.start_time))
    anchor = max(week_start_date, week_start_for(date_from))
    while anchor <= date_to:
        for shift in ordered:
            d = resolve_occurrence(anchor, shift.day_of_week)
            if date_from <= d <= date_to:
                yield Occurrence(d, shift)
        anchor += timedelta(days=7)
