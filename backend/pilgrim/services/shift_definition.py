from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import Any, Iterable

from pilgrim.core.errors import ValidationError

# 0=Sunday .. 6=Saturday, same numbering as the console
DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def parse_time(value: Any, *, field: str = "time") -> time:
    if isinstance(value, time):
        return value.replace(tzinfo=None)
    if isinstance(value, str):
        try:
            return time.fromisoformat(value.strip())
        except ValueError:
            pass
    raise ValidationError(f"Bad {field}, expected HH:MM or HH:MM:SS", details={"field": field, "value": str(value)})


def check_day_of_week(day_of_week: Any) -> int:
    # bool is an int subclass; True must not pass as Monday
    if isinstance(day_of_week, bool) or not isinstance(day_of_week, int) or not 0 <= day_of_week <= 6:
        raise ValidationError("day_of_week must be an integer 0-6 (0=Sunday)", details={"day_of_week": day_of_week})
    return day_of_week


@dataclass(frozen=True, order=True)
class ShiftDefinition:
    day_of_week: int
    start_time: time
    end_time: time

    @classmethod
    def of(cls, day_of_week: Any, start_time: Any, end_time: Any) -> "ShiftDefinition":
        """Build a checked definition from loose input (times may be strings)."""
        dow = check_day_of_week(day_of_week)
        start = parse_time(start_time, field="start_time")
        end = parse_time(end_time, field="end_time")
        if not start < end:
            raise ValidationError(
                "start_time must be before end_time",
                details={"day_of_week": dow, "start_time": start.isoformat(), "end_time": end.isoformat()},
            )
        return cls(dow, start, end)

    @classmethod
    def from_row(cls, row) -> "ShiftDefinition":
        return cls(int(row.day_of_week), row.start_time, row.end_time)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShiftDefinition":
        return cls.of(data.get("day_of_week"), data.get("start_time"), data.get("end_time"))

    @property
    def week_order(self) -> int:
        """Position inside a Monday-anchored week (Monday=0 .. Sunday=6)."""
        return (self.day_of_week - 1) % 7

    def overlaps(self, other: "ShiftDefinition") -> bool:
        return (
            self.day_of_week == other.day_of_week
            and self.start_time < other.end_time
            and other.start_time < self.end_time
        )

    def times(self) -> dict[str, str]:
        return {"start_time": self.start_time.isoformat(), "end_time": self.end_time.isoformat()}

    def __str__(self) -> str:
        return (
            f"{DAY_NAMES[self.day_of_week]} "
            f"{self.start_time.strftime('%H:%M')}-{self.end_time.strftime('%H:%M')}"
        )


def coerce_shift(value: Any) -> ShiftDefinition:
    if isinstance(value, ShiftDefinition):
        return ShiftDefinition.of(value.day_of_week, value.start_time, value.end_time)
    if isinstance(value, dict):
        return ShiftDefinition.from_dict(value)
    # pydantic ShiftIn or any object exposing the three attributes
    return ShiftDefinition.of(
        getattr(value, "day_of_week", None),
        getattr(value, "start_time", None),
        getattr(value, "end_time", None),
    )


def validate_shift_set(shifts: Iterable[Any]) -> list[ShiftDefinition]:
    """Check a submitted shift set and return it sorted Monday-first.

    Rules: at least one shift, overlapping shifts on the same day are rejected,
    and a guide gets at most one shift per day.
    """
    items = [coerce_shift(s) for s in shifts]
    if not items:
        raise ValidationError("At least one shift is required")

    by_day: dict[int, list[ShiftDefinition]] = {}
    for s in items:
        by_day.setdefault(s.day_of_week, []).append(s)

    for day, same_day in by_day.items():
        if len(same_day) < 2:
            continue
        for i, a in enumerate(same_day):
            for b in same_day[i + 1:]:
                if a.overlaps(b):
                    raise ValidationError(
                        f"Overlapping shifts on {DAY_NAMES[day]}: {a} and {b}",
                        details={"day_of_week": day},
                    )
        raise ValidationError(
            f"Only one shift per day is allowed ({DAY_NAMES[day]} has {len(same_day)})",
            details={"day_of_week": day},
        )

    return sorted(items, key=lambda s: (s.week_order, s.start_time))
