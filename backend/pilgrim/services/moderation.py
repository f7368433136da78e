"""Moderation state machine shared by every content kind.

    submit -> pending -> approved | rejected
    is_active (soft delete) toggles independently in any status

Kinds differ only in payload validation (services.content_kinds).
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pilgrim.core.config import settings
from pilgrim.core.errors import ConflictError, InvalidStateError, ValidationError
from pilgrim.core.locks import KeyedLocks, entity_locks
from pilgrim.models import ContentItem, ModerationAudit
from pilgrim.models.enums import AuditAction, AuditEntity, ContentKind, ModerationStatus
from pilgrim.services.audit import history, record_transition
from pilgrim.services.content_kinds import get_kind
from pilgrim.services.notify import Notifier, log_notifier, notify_user
from pilgrim.services.schedule_resolver import local_date
from pilgrim.services.store import ContentStore, Page

log = logging.getLogger("pilgrim.moderation")

PENDING = ModerationStatus.PENDING.value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clean_reason(reason: str | None) -> str:
    """Rejection reasons must carry text; whitespace alone does not count."""
    v = (reason or "").strip()
    if not v:
        raise ValidationError("Rejection reason is required", details={"field": "reason"})
    if len(v) > settings.REASON_MAX_LENGTH:
        raise ValidationError(
            f"Rejection reason is longer than {settings.REASON_MAX_LENGTH} characters",
            details={"field": "reason"},
        )
    return v


class ModerationEngine:
    def __init__(
        self,
        db: Session,
        *,
        clock: Callable[[], datetime] | None = None,
        notifier: Notifier | None = log_notifier,
        locks: KeyedLocks = entity_locks,
    ):
        self.db = db
        self.store = ContentStore(db)
        self.clock = clock or _utcnow
        self.notifier = notifier
        self.locks = locks

    # ---------- transitions ----------

    def submit(
        self,
        kind: ContentKind | str,
        payload: dict[str, Any] | BaseModel,
        author: int,
        *,
        site_id: int,
    ) -> ContentItem:
        kd = get_kind(kind)
        data = kd.validate(payload)
        self.store.require_user(author)
        self.store.require_site(site_id)

        now = self.clock()
        prefix = kd.code_prefix(data)
        # codes are numbered per prefix, so creation of same-prefix items is serialized
        with self.locks.hold(("code", prefix)):
            try:
                item = ContentItem(
                    code=self.store.next_code(ContentItem, prefix, local_date(now)),
                    site_id=site_id,
                    kind=kd.kind.value,
                    status=PENDING,
                    is_active=True,
                    payload=data,
                    created_by_user_id=author,
                    created_at=now,
                )
                self.store.add(item)
                record_transition(
                    self.db,
                    entity_type=AuditEntity.CONTENT,
                    entity_id=item.id,
                    action=AuditAction.SUBMIT,
                    actor_user_id=author,
                    at=now,
                    to_status=PENDING,
                    to_active=True,
                )
                self.db.commit()
            except IntegrityError as e:
                # another process took the same code between count and insert
                self.db.rollback()
                raise ConflictError(
                    "Content code is already taken, try again",
                    details={"code_prefix": prefix},
                ) from e
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(item)
        log.info("content submitted id=%s code=%s kind=%s site_id=%s by=%s", item.id, item.code, item.kind, site_id, author)
        return item

    def approve(self, item_id: int, reviewer: int) -> ContentItem:
        return self._review(item_id, reviewer, ModerationStatus.APPROVED)

    def reject(self, item_id: int, reviewer: int, reason: str | None) -> ContentItem:
        return self._review(item_id, reviewer, ModerationStatus.REJECTED, reason=clean_reason(reason))

    def _review(
        self,
        item_id: int,
        reviewer: int,
        to_status: ModerationStatus,
        *,
        reason: str | None = None,
    ) -> ContentItem:
        verb = "approved" if to_status is ModerationStatus.APPROVED else "rejected"

        with self.locks.hold(("content", item_id)):
            try:
                item = self.store.get(item_id)
                self.db.refresh(item)
                self.store.require_user(reviewer)

                if item.status != PENDING:
                    raise InvalidStateError(
                        f"Only pending content can be {verb} (current status: {item.status})",
                        details={"item_id": item_id, "status": item.status},
                    )

                now = self.clock()
                ok = self.store.compare_and_set(
                    ContentItem,
                    item_id,
                    expected_status=PENDING,
                    values={
                        "status": to_status.value,
                        "rejection_reason": reason,
                        "reviewed_by_user_id": reviewer,
                        "reviewed_at": now,
                        "updated_at": now,
                    },
                )
                if not ok:
                    raise InvalidStateError(
                        "Content was already reviewed by someone else",
                        details={"item_id": item_id},
                    )

                record_transition(
                    self.db,
                    entity_type=AuditEntity.CONTENT,
                    entity_id=item_id,
                    action=AuditAction.APPROVE if to_status is ModerationStatus.APPROVED else AuditAction.REJECT,
                    actor_user_id=reviewer,
                    at=now,
                    from_status=PENDING,
                    to_status=to_status.value,
                    note=reason,
                )
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(item)
        log.info("content %s id=%s code=%s by=%s", verb, item.id, item.code, reviewer)

        title = get_kind(item.kind).title.capitalize()
        text = f"{title} {item.code} was {verb}"
        if reason:
            text += f": {reason}"
        notify_user(self.notifier, item.created_by_user_id, text)
        return item

    def set_active(self, item_id: int, active: bool, actor: int) -> ContentItem:
        """Hide (soft delete) or restore content. Setting the current value is a no-op."""
        active = bool(active)

        with self.locks.hold(("content", item_id)):
            try:
                item = self.store.get(item_id)
                self.db.refresh(item)
                self.store.require_user(actor)

                if item.is_active == active:
                    log.debug("content id=%s already is_active=%s", item_id, active)
                    return item

                now = self.clock()
                item.is_active = active
                item.updated_at = now
                record_transition(
                    self.db,
                    entity_type=AuditEntity.CONTENT,
                    entity_id=item_id,
                    action=AuditAction.ACTIVATE if active else AuditAction.DEACTIVATE,
                    actor_user_id=actor,
                    at=now,
                    from_status=item.status,
                    to_status=item.status,
                    from_active=not active,
                    to_active=active,
                )
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(item)
        log.info("content %s id=%s code=%s by=%s", "restored" if active else "hidden", item.id, item.code, actor)
        return item

    # ---------- queries ----------

    def get(self, item_id: int, kind: ContentKind | str | None = None) -> ContentItem:
        return self.store.get(item_id, kind)

    def list_items(self, **filters: Any) -> Page[ContentItem]:
        return self.store.list(**filters)

    def history(self, item_id: int) -> list[ModerationAudit]:
        self.store.get(item_id)
        return history(self.db, entity_type=AuditEntity.CONTENT, entity_id=item_id)
