from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from sqlalchemy import JSON, Boolean, CheckConstraint, Date, DateTime, ForeignKey, Index, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pilgrim.core.db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ShiftSubmission(Base):
    """A guide's recurring weekly availability, anchored to a Monday.

    Lifecycle: pending -> approved | rejected. An approved submission is later
    moved to `superseded` (is_active=False) when a newer one for the same guide
    is approved, so at most one row per guide is ever `approved`.
    """

    __tablename__ = "shift_submissions"
    __table_args__ = (
        CheckConstraint(
            "(status = 'rejected') = (rejection_reason IS NOT NULL)",
            name="ck_shift_submissions_rejection_reason",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)

    guide_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True, nullable=False)
    site_id: Mapped[int] = mapped_column(ForeignKey("sites.id"), index=True, nullable=False)

    submission_type: Mapped[str] = mapped_column(String(10), nullable=False)  # new | change
    week_start_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)

    change_reason: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    # baseline the `changes` snapshot was computed against
    previous_submission_id: Mapped[int | None] = mapped_column(ForeignKey("shift_submissions.id"), nullable=True)
    changes: Mapped[list[dict[str, Any]] | None] = mapped_column(JSON, nullable=True)

    status: Mapped[str] = mapped_column(String(20), index=True, nullable=False, default="pending")
    rejection_reason: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    reviewed_by_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    superseded_by_id: Mapped[int | None] = mapped_column(ForeignKey("shift_submissions.id"), nullable=True)
    superseded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    guide = relationship("User", foreign_keys=[guide_id])
    site = relationship("Site")
    reviewed_by_user = relationship("User", foreign_keys=[reviewed_by_user_id])

    shifts = relationship(
        "SubmissionShift",
        back_populates="submission",
        order_by="SubmissionShift.day_of_week.asc()",
        lazy="selectin",
        cascade="all, delete-orphan",
    )

    @property
    def total_shifts(self) -> int:
        return len(self.shifts)


# Database-level backstop for the single approved schedule per guide
Index(
    "uq_shift_submissions_guide_approved",
    ShiftSubmission.guide_id,
    unique=True,
    sqlite_where=text("status = 'approved'"),
    postgresql_where=text("status = 'approved'"),
)
Index("ix_shift_submissions_site_status", ShiftSubmission.site_id, ShiftSubmission.status)
