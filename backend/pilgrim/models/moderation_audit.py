from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pilgrim.core.db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ModerationAudit(Base):
    """Append-only record of a moderation transition (who, when, from, to)."""

    __tablename__ = "moderation_audit"

    id: Mapped[int] = mapped_column(primary_key=True)

    entity_type: Mapped[str] = mapped_column(String(20), nullable=False)  # content | shift_submission
    entity_id: Mapped[int] = mapped_column(Integer, nullable=False)
    action: Mapped[str] = mapped_column(String(20), nullable=False)

    actor_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)

    from_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    to_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    from_active: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    to_active: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    note: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    actor = relationship("User")


Index("ix_moderation_audit_entity", ModerationAudit.entity_type, ModerationAudit.entity_id)
