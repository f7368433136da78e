"""Shift submission workflow.

A guide submits recurring weekly availability (`new`), or proposes edits to the
approved schedule (`change`, with a frozen diff). A manager approves or rejects.

Invariant: per guide, at most one submission is `approved`. Approving a new one
retires the previous one (status `superseded`, is_active=False) in the same
transaction, under the guide's lock.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Iterable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pilgrim.core.errors import ConflictError, InvalidStateError, ValidationError
from pilgrim.core.locks import KeyedLocks, entity_locks
from pilgrim.models import ModerationAudit, ShiftSubmission, SubmissionShift
from pilgrim.models.enums import AuditAction, AuditEntity, ModerationStatus, SubmissionType
from pilgrim.schemas.shifts import CalendarEntryOut, ShiftSubmissionCreateIn, TodayShiftOut
from pilgrim.services.audit import history, record_transition
from pilgrim.services.moderation import clean_reason
from pilgrim.services.notify import Notifier, log_notifier, notify_user
from pilgrim.services.schedule_resolver import (
    check_week_start,
    is_today,
    local_date,
    occurrences_between,
    week_start_for,
)
from pilgrim.services.shift_definition import ShiftDefinition, validate_shift_set
from pilgrim.services.shift_diff import ChangeSet, diff
from pilgrim.services.store import Page, SubmissionStore

log = logging.getLogger("pilgrim.submissions")

PENDING = ModerationStatus.PENDING.value
APPROVED = ModerationStatus.APPROVED.value
REJECTED = ModerationStatus.REJECTED.value
SUPERSEDED = ModerationStatus.SUPERSEDED.value

CODE_PREFIX = "SHF"
MAX_CALENDAR_DAYS = 366


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def shifts_of(sub: ShiftSubmission) -> list[ShiftDefinition]:
    return [ShiftDefinition.from_row(r) for r in sub.shifts]


class SubmissionWorkflow:
    def __init__(
        self,
        db: Session,
        *,
        clock: Callable[[], datetime] | None = None,
        notifier: Notifier | None = log_notifier,
        locks: KeyedLocks = entity_locks,
    ):
        self.db = db
        self.store = SubmissionStore(db)
        self.clock = clock or _utcnow
        self.notifier = notifier
        self.locks = locks

    # ---------- create ----------

    def create(
        self,
        guide_id: int,
        site_id: int,
        week_start_date: date,
        shifts: Iterable[Any],
        submission_type: SubmissionType | str = SubmissionType.NEW,
        *,
        change_reason: str | None = None,
    ) -> ShiftSubmission:
        check_week_start(week_start_date)
        try:
            stype = SubmissionType(submission_type)
        except ValueError:
            raise ValidationError("Bad submission_type", details={"submission_type": str(submission_type)})
        proposed = validate_shift_set(shifts)

        guide = self.store.require_user(guide_id)
        self.store.require_site(site_id)
        if guide.site_id is not None and guide.site_id != site_id:
            raise ValidationError(
                "Guide does not belong to this site",
                details={"guide_id": guide_id, "site_id": site_id},
            )
        change_reason = (change_reason or "").strip() or None

        with self.locks.hold(("guide", guide_id)), self.locks.hold(("code", CODE_PREFIX)):
            try:
                current = self.store.current_approved(guide_id)
                changes = None
                previous_id = None

                if stype is SubmissionType.CHANGE:
                    if current is None:
                        raise ValidationError(
                            "No existing schedule to change against",
                            details={"guide_id": guide_id},
                        )
                    change_set = diff(shifts_of(current), proposed)
                    if change_set.is_empty:
                        raise ValidationError(
                            "Change does not differ from the approved schedule",
                            details={"current_submission_id": current.id},
                        )
                    changes = change_set.to_snapshot()
                    previous_id = current.id
                elif current is not None:
                    raise ConflictError(
                        "Guide already has an approved schedule, submit a change instead",
                        details={"guide_id": guide_id, "current_submission_id": current.id},
                    )

                now = self.clock()
                sub = ShiftSubmission(
                    code=self.store.next_code(ShiftSubmission, CODE_PREFIX, local_date(now)),
                    guide_id=guide_id,
                    site_id=site_id,
                    submission_type=stype.value,
                    week_start_date=week_start_date,
                    change_reason=change_reason,
                    previous_submission_id=previous_id,
                    changes=changes,
                    status=PENDING,
                    is_active=True,
                    created_at=now,
                    shifts=[
                        SubmissionShift(day_of_week=s.day_of_week, start_time=s.start_time, end_time=s.end_time)
                        for s in proposed
                    ],
                )
                self.store.add(sub)
                record_transition(
                    self.db,
                    entity_type=AuditEntity.SHIFT_SUBMISSION,
                    entity_id=sub.id,
                    action=AuditAction.SUBMIT,
                    actor_user_id=guide_id,
                    at=now,
                    to_status=PENDING,
                    to_active=True,
                    note=change_reason,
                )
                self.db.commit()
            except IntegrityError as e:
                # another process took the same code between count and insert
                self.db.rollback()
                raise ConflictError(
                    "Submission code is already taken, try again",
                    details={"guide_id": guide_id},
                ) from e
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(sub)
        log.info(
            "shift submission created id=%s code=%s guide_id=%s type=%s week=%s shifts=%s",
            sub.id, sub.code, guide_id, stype.value, week_start_date.isoformat(), len(proposed),
        )
        return sub

    def create_from_request(self, req: ShiftSubmissionCreateIn) -> ShiftSubmission:
        return self.create(
            req.guide_id,
            req.site_id,
            req.week_start_date,
            req.shifts,
            req.submission_type,
            change_reason=req.change_reason,
        )

    # ---------- review ----------

    def approve(self, submission_id: int, reviewer: int) -> ShiftSubmission:
        sub = self.store.get(submission_id)
        guide_id = sub.guide_id

        # wider scope than the submission: the guide's previous schedule is written too
        with self.locks.hold(("guide", guide_id)):
            try:
                self.db.refresh(sub)
                self.store.require_user(reviewer)
                self._require_pending(sub, "approved")

                now = self.clock()
                previous = self.store.current_approved(guide_id, exclude_id=sub.id)
                if previous is not None:
                    ok = self.store.compare_and_set(
                        ShiftSubmission,
                        previous.id,
                        expected_status=APPROVED,
                        values={
                            "status": SUPERSEDED,
                            "is_active": False,
                            "superseded_by_id": sub.id,
                            "superseded_at": now,
                            "updated_at": now,
                        },
                    )
                    if not ok:
                        raise InvalidStateError(
                            "Guide schedule changed during approval",
                            details={"guide_id": guide_id, "previous_submission_id": previous.id},
                        )
                    record_transition(
                        self.db,
                        entity_type=AuditEntity.SHIFT_SUBMISSION,
                        entity_id=previous.id,
                        action=AuditAction.SUPERSEDE,
                        actor_user_id=reviewer,
                        at=now,
                        from_status=APPROVED,
                        to_status=SUPERSEDED,
                        from_active=True,
                        to_active=False,
                        note=f"superseded by {sub.code}",
                    )

                ok = self.store.compare_and_set(
                    ShiftSubmission,
                    sub.id,
                    expected_status=PENDING,
                    values={
                        "status": APPROVED,
                        "reviewed_by_user_id": reviewer,
                        "reviewed_at": now,
                        "updated_at": now,
                    },
                )
                if not ok:
                    raise InvalidStateError(
                        "Submission was already reviewed by someone else",
                        details={"submission_id": sub.id},
                    )
                record_transition(
                    self.db,
                    entity_type=AuditEntity.SHIFT_SUBMISSION,
                    entity_id=sub.id,
                    action=AuditAction.APPROVE,
                    actor_user_id=reviewer,
                    at=now,
                    from_status=PENDING,
                    to_status=APPROVED,
                )
                self.db.commit()
            except IntegrityError as e:
                # another process approved a schedule for this guide meanwhile
                self.db.rollback()
                raise InvalidStateError(
                    "Guide schedule changed during approval",
                    details={"guide_id": guide_id, "submission_id": submission_id},
                ) from e
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(sub)
        if previous is not None:
            log.info("shift submission id=%s superseded by id=%s guide_id=%s", previous.id, sub.id, guide_id)
        log.info("shift submission approved id=%s code=%s guide_id=%s by=%s", sub.id, sub.code, guide_id, reviewer)
        notify_user(self.notifier, guide_id, f"Your shift schedule {sub.code} was approved")
        return sub

    def reject(self, submission_id: int, reviewer: int, reason: str | None) -> ShiftSubmission:
        reason = clean_reason(reason)
        sub = self.store.get(submission_id)

        with self.locks.hold(("guide", sub.guide_id)):
            try:
                self.db.refresh(sub)
                self.store.require_user(reviewer)
                self._require_pending(sub, "rejected")

                now = self.clock()
                ok = self.store.compare_and_set(
                    ShiftSubmission,
                    sub.id,
                    expected_status=PENDING,
                    values={
                        "status": REJECTED,
                        "rejection_reason": reason,
                        "reviewed_by_user_id": reviewer,
                        "reviewed_at": now,
                        "updated_at": now,
                    },
                )
                if not ok:
                    raise InvalidStateError(
                        "Submission was already reviewed by someone else",
                        details={"submission_id": sub.id},
                    )
                record_transition(
                    self.db,
                    entity_type=AuditEntity.SHIFT_SUBMISSION,
                    entity_id=sub.id,
                    action=AuditAction.REJECT,
                    actor_user_id=reviewer,
                    at=now,
                    from_status=PENDING,
                    to_status=REJECTED,
                    note=reason,
                )
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(sub)
        log.info("shift submission rejected id=%s code=%s guide_id=%s by=%s", sub.id, sub.code, sub.guide_id, reviewer)
        notify_user(self.notifier, sub.guide_id, f"Your shift schedule {sub.code} was rejected: {reason}")
        return sub

    @staticmethod
    def _require_pending(sub: ShiftSubmission, verb: str) -> None:
        if sub.status != PENDING:
            raise InvalidStateError(
                f"Only pending submissions can be {verb} (current status: {sub.status})",
                details={"submission_id": sub.id, "status": sub.status},
            )

    # ---------- queries ----------

    def get(self, submission_id: int) -> ShiftSubmission:
        return self.store.get(submission_id)

    def list_submissions(self, **filters: Any) -> Page[ShiftSubmission]:
        return self.store.list(**filters)

    def current_schedule(self, guide_id: int) -> ShiftSubmission | None:
        self.store.require_user(guide_id)
        return self.store.current_approved(guide_id)

    def changes_for(self, sub: ShiftSubmission) -> ChangeSet | None:
        if sub.changes is None:
            return None
        return ChangeSet.from_snapshot(sub.changes)

    def history(self, submission_id: int) -> list[ModerationAudit]:
        self.store.get(submission_id)
        return history(self.db, entity_type=AuditEntity.SHIFT_SUBMISSION, entity_id=submission_id)

    def todays_shifts(self, site_id: int, now: datetime | None = None) -> list[TodayShiftOut]:
        """Shifts of approved schedules at a site that fall on today, by start time."""
        self.store.require_site(site_id)
        now = now or self.clock()
        today = local_date(now)
        anchor = week_start_for(today)

        out: list[TodayShiftOut] = []
        subs = self.store.active_schedules(site_id=site_id, statuses=[APPROVED], starting_on_or_before=today)
        for sub in subs:
            for shift in shifts_of(sub):
                if not is_today(anchor, shift.day_of_week, now):
                    continue
                out.append(
                    TodayShiftOut(
                        submission_id=sub.id,
                        guide_id=sub.guide_id,
                        guide_name=sub.guide.full_name if sub.guide else None,
                        date=today,
                        day_of_week=shift.day_of_week,
                        start_time=shift.start_time,
                        end_time=shift.end_time,
                    )
                )

        out.sort(key=lambda r: (r.start_time, r.guide_name or "", r.submission_id))
        return out

    def calendar(
        self,
        site_id: int,
        date_from: date,
        date_to: date,
        *,
        guide_id: int | None = None,
    ) -> list[CalendarEntryOut]:
        """Dated occurrences of approved and pending schedules within [date_from, date_to]."""
        self.store.require_site(site_id)
        if date_to < date_from:
            raise ValidationError("date_to must not be before date_from")
        if date_to - date_from > timedelta(days=MAX_CALENDAR_DAYS):
            raise ValidationError(f"Calendar range is limited to {MAX_CALENDAR_DAYS} days")

        subs = self.store.active_schedules(
            site_id=site_id,
            statuses=[APPROVED, PENDING],
            starting_on_or_before=date_to,
            guide_id=guide_id,
        )
        out: list[CalendarEntryOut] = []
        for sub in subs:
            for occ in occurrences_between(sub.week_start_date, shifts_of(sub), date_from, date_to):
                out.append(
                    CalendarEntryOut(
                        date=occ.date,
                        submission_id=sub.id,
                        guide_id=sub.guide_id,
                        status=sub.status,
                        day_of_week=occ.shift.day_of_week,
                        start_time=occ.shift.start_time,
                        end_time=occ.shift.end_time,
                    )
                )

        out.sort(key=lambda r: (r.date, r.start_time, r.submission_id))
        return out
