from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Boolean, CheckConstraint, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pilgrim.core.db import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentItem(Base):
    """One moderated piece of site content.

    All four kinds (media, mass_schedule, event, nearby_place) share this table:
    - `kind` selects the payload descriptor (see services.content_kinds)
    - `payload` holds the kind-specific fields, already validated
    - `status` and `is_active` are independent: hiding approved content keeps its approval
    """

    __tablename__ = "content_items"
    __table_args__ = (
        CheckConstraint(
            "(status = 'rejected') = (rejection_reason IS NOT NULL)",
            name="ck_content_items_rejection_reason",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)

    site_id: Mapped[int] = mapped_column(ForeignKey("sites.id"), index=True, nullable=False)
    kind: Mapped[str] = mapped_column(String(20), index=True, nullable=False)  # media | mass_schedule | event | nearby_place

    status: Mapped[str] = mapped_column(String(20), index=True, nullable=False, default="pending")
    rejection_reason: Mapped[str | None] = mapped_column(String(1000), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    payload: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_by_user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    reviewed_by_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    site = relationship("Site")
    created_by_user = relationship("User", foreign_keys=[created_by_user_id])
    reviewed_by_user = relationship("User", foreign_keys=[reviewed_by_user_id])


Index("ix_content_items_site_kind_status", ContentItem.site_id, ContentItem.kind, ContentItem.status)
