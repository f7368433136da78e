from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from pilgrim.core.errors import ValidationError
from pilgrim.services.shift_definition import DAY_NAMES, ShiftDefinition


def _index_by_day(shifts: Iterable[ShiftDefinition], *, side: str) -> dict[int, ShiftDefinition]:
    out: dict[int, ShiftDefinition] = {}
    for s in shifts:
        if s.day_of_week in out:
            raise ValidationError(
                f"{side} schedule has more than one shift on {DAY_NAMES[s.day_of_week]}",
                details={"day_of_week": s.day_of_week},
            )
        out[s.day_of_week] = s
    return out


@dataclass(frozen=True)
class ChangeSet:
    added: frozenset[ShiftDefinition] = field(default_factory=frozenset)
    removed: frozenset[ShiftDefinition] = field(default_factory=frozenset)
    modified: frozenset[tuple[ShiftDefinition, ShiftDefinition]] = field(default_factory=frozenset)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.modified)

    def to_snapshot(self) -> list[dict[str, Any]]:
        """Per-day rows, Monday first, in the shape the console renders."""
        rows: list[tuple[int, dict[str, Any]]] = []
        for s in self.added:
            rows.append((s.week_order, {
                "day_of_week": s.day_of_week, "old": None, "new": s.times(),
                "is_changed": False, "is_new": True, "is_removed": False,
            }))
        for s in self.removed:
            rows.append((s.week_order, {
                "day_of_week": s.day_of_week, "old": s.times(), "new": None,
                "is_changed": False, "is_new": False, "is_removed": True,
            }))
        for old, new in self.modified:
            rows.append((old.week_order, {
                "day_of_week": old.day_of_week, "old": old.times(), "new": new.times(),
                "is_changed": True, "is_new": False, "is_removed": False,
            }))
        rows.sort(key=lambda r: r[0])
        return [r for _, r in rows]

    @classmethod
    def from_snapshot(cls, rows: Iterable[dict[str, Any]]) -> "ChangeSet":
        added, removed, modified = set(), set(), set()
        for row in rows:
            day = row["day_of_week"]
            old = ShiftDefinition.of(day, row["old"]["start_time"], row["old"]["end_time"]) if row.get("old") else None
            new = ShiftDefinition.of(day, row["new"]["start_time"], row["new"]["end_time"]) if row.get("new") else None
            if old and new:
                modified.add((old, new))
            elif new:
                added.add(new)
            elif old:
                removed.add(old)
        return cls(frozenset(added), frozenset(removed), frozenset(modified))

    def summary(self) -> str:
        parts = [f"+{s}" for s in sorted(self.added, key=lambda s: s.week_order)]
        parts += [f"-{s}" for s in sorted(self.removed, key=lambda s: s.week_order)]
        parts += [f"~{o} -> {n}" for o, n in sorted(self.modified, key=lambda p: p[0].week_order)]
        return ", ".join(parts) or "no changes"


def diff(current: Iterable[ShiftDefinition], proposed: Iterable[ShiftDefinition]) -> ChangeSet:
    """Difference between an approved shift set and a proposed one, by day of week.

    Days only in `proposed` are added, days only in `current` are removed, days in
    both with other times are modified. Identical days produce nothing.
    """
    cur = _index_by_day(current, side="current")
    new = _index_by_day(proposed, side="proposed")

    added = frozenset(s for day, s in new.items() if day not in cur)
    removed = frozenset(s for day, s in cur.items() if day not in new)
    modified = frozenset(
        (cur[day], s)
        for day, s in new.items()
        if day in cur and (cur[day].start_time, cur[day].end_time) != (s.start_time, s.end_time)
    )
    return ChangeSet(added=added, removed=removed, modified=modified)
