from __future__ import annotations

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from pilgrim.models import ModerationAudit
from pilgrim.models.enums import AuditAction, AuditEntity


def record_transition(
    db: Session,
    *,
    entity_type: AuditEntity,
    entity_id: int,
    action: AuditAction,
    actor_user_id: int | None,
    at: datetime,
    from_status: str | None = None,
    to_status: str | None = None,
    from_active: bool | None = None,
    to_active: bool | None = None,
    note: str | None = None,
) -> ModerationAudit:
    row = ModerationAudit(
        entity_type=entity_type.value,
        entity_id=entity_id,
        action=action.value,
        actor_user_id=actor_user_id,
        from_status=from_status,
        to_status=to_status,
        from_active=from_active,
        to_active=to_active,
        note=note,
        created_at=at,
    )
    db.add(row)
    return row


def history(db: Session, *, entity_type: AuditEntity, entity_id: int) -> list[ModerationAudit]:
    return list(
        db.execute(
            select(ModerationAudit)
            .where(
                ModerationAudit.entity_type == entity_type.value,
                ModerationAudit.entity_id == entity_id,
            )
            .order_by(ModerationAudit.id.asc())
        ).scalars().all()
    )
