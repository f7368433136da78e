from __future__ import annotations

from datetime import time

from sqlalchemy import ForeignKey, Integer, Time, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pilgrim.core.db import Base


class SubmissionShift(Base):
    """One recurring shift of a submission (e.g. Monday 08:00-12:00)."""

    __tablename__ = "submission_shifts"
    __table_args__ = (
        UniqueConstraint("submission_id", "day_of_week", name="uq_submission_shifts_day"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)

    submission_id: Mapped[int] = mapped_column(ForeignKey("shift_submissions.id"), index=True)

    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)  # 0=Sunday .. 6=Saturday
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    submission = relationship("ShiftSubmission", back_populates="shifts")
