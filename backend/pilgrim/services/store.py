"""Persistence for moderated content and shift submissions.

Everything here works on a caller-provided Session and never commits: the
engines own transaction boundaries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Generic, Sequence, TypeVar

from sqlalchemy import cast, func, select, update
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Session

from pilgrim.core.config import settings
from pilgrim.core.errors import NotFoundError, ValidationError
from pilgrim.models import ContentItem, ShiftSubmission, Site, User
from pilgrim.models.enums import ContentKind, ModerationStatus
from pilgrim.services.shift_definition import check_day_of_week

T = TypeVar("T")


@dataclass
class Page(Generic[T]):
    items: list[T]
    page: int
    limit: int
    total_items: int

    @property
    def total_pages(self) -> int:
        return (self.total_items + self.limit - 1) // self.limit if self.total_items else 0

    def pagination(self) -> dict[str, int]:
        return {
            "page": self.page,
            "limit": self.limit,
            "totalItems": self.total_items,
            "totalPages": self.total_pages,
        }


def clamp_paging(page: int | None, limit: int | None) -> tuple[int, int]:
    page = max(int(page or 1), 1)
    limit = int(limit or settings.DEFAULT_PAGE_SIZE)
    limit = min(max(limit, 1), settings.MAX_PAGE_SIZE)
    return page, limit


def _status_value(status: ModerationStatus | str) -> str:
    try:
        return ModerationStatus(status).value
    except ValueError:
        raise ValidationError("Bad status", details={"status": str(status)})


def _kind_value(kind: ContentKind | str) -> str:
    try:
        return ContentKind(kind).value
    except ValueError:
        raise ValidationError("Bad content kind", details={"kind": str(kind)})


class Store:
    def __init__(self, db: Session):
        self.db = db

    # ---------- referenced entities ----------

    def require_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found", details={"user_id": user_id})
        return user

    def require_site(self, site_id: int) -> Site:
        site = self.db.get(Site, site_id)
        if site is None:
            raise NotFoundError("Site not found", details={"site_id": site_id})
        return site

    # ---------- helpers ----------

    def next_code(self, model, prefix: str, on: date) -> str:
        """Human-readable code like IMG0115003: prefix, MMDD, running number.

        The stem carries no year, so numbering for a calendar day continues
        where the same day of earlier years stopped (IMG0115004 after three
        items on 15 January of the year before). Codes stay unique.
        """
        stem = f"{prefix}{on:%m%d}"
        n = self.db.scalar(select(func.count()).select_from(model).where(model.code.like(f"{stem}%"))) or 0
        return f"{stem}{n + 1:03d}"

    def compare_and_set(self, model, entity_id: int, *, expected_status: str, values: dict[str, Any]) -> bool:
        """UPDATE ... WHERE id=:id AND status=:expected. False when someone got there first."""
        res = self.db.execute(
            update(model)
            .where(model.id == entity_id, model.status == expected_status)
            .values(**values)
            .execution_options(synchronize_session="evaluate")
        )
        return res.rowcount == 1

    def _page(self, stmt, order_by: Sequence, page: int | None, limit: int | None) -> Page:
        page, limit = clamp_paging(page, limit)
        total = self.db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
        rows = self.db.execute(
            stmt.order_by(*order_by).offset((page - 1) * limit).limit(limit)
        ).scalars().all()
        return Page(items=list(rows), page=page, limit=limit, total_items=int(total))


class ContentStore(Store):
    def get(self, item_id: int, kind: ContentKind | str | None = None) -> ContentItem:
        item = self.db.get(ContentItem, item_id)
        if item is None or (kind is not None and item.kind != _kind_value(kind)):
            raise NotFoundError("Content not found", details={"item_id": item_id})
        return item

    def add(self, item: ContentItem) -> ContentItem:
        self.db.add(item)
        self.db.flush()
        return item

    def list(
        self,
        *,
        kind: ContentKind | str | None = None,
        site_id: int | None = None,
        status: ModerationStatus | str | None = None,
        is_active: bool | None = None,
        payload_filters: dict[str, str] | None = None,
        day_of_week: int | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[ContentItem]:
        """Newest first. `day_of_week` keeps mass schedules celebrated on that day."""
        stmt = select(ContentItem)
        if kind is not None:
            stmt = stmt.where(ContentItem.kind == _kind_value(kind))
        if site_id is not None:
            stmt = stmt.where(ContentItem.site_id == site_id)
        if status:
            stmt = stmt.where(ContentItem.status == _status_value(status))
        if is_active is not None:
            stmt = stmt.where(ContentItem.is_active.is_(is_active))
        # e.g. {"type": "video"} for media, {"category": "food"} for nearby places
        for key, value in (payload_filters or {}).items():
            stmt = stmt.where(ContentItem.payload[key].as_string() == str(value))
        if day_of_week is not None:
            stmt = stmt.where(self._payload_list_contains("days_of_week", check_day_of_week(day_of_week)))

        return self._page(stmt, (ContentItem.created_at.desc(), ContentItem.id.desc()), page, limit)

    def _payload_list_contains(self, key: str, value: int):
        """payload[key] is a JSON array holding `value`."""
        if self.db.get_bind().dialect.name == "postgresql":
            return cast(ContentItem.payload, JSONB)[key].contains([value])
        # SQLite: one row per array element
        elems = func.json_each(ContentItem.payload, f"$.{key}").table_valued("value")
        return select(elems.c.value).where(elems.c.value == value).exists()


class SubmissionStore(Store):
    def get(self, submission_id: int) -> ShiftSubmission:
        sub = self.db.get(ShiftSubmission, submission_id)
        if sub is None:
            raise NotFoundError("Shift submission not found", details={"submission_id": submission_id})
        return sub

    def add(self, sub: ShiftSubmission) -> ShiftSubmission:
        self.db.add(sub)
        self.db.flush()
        return sub

    def current_approved(self, guide_id: int, *, exclude_id: int | None = None) -> ShiftSubmission | None:
        stmt = select(ShiftSubmission).where(
            ShiftSubmission.guide_id == guide_id,
            ShiftSubmission.status == ModerationStatus.APPROVED.value,
        )
        if exclude_id is not None:
            stmt = stmt.where(ShiftSubmission.id != exclude_id)
        return self.db.execute(stmt.order_by(ShiftSubmission.id.desc())).scalars().first()

    def list(
        self,
        *,
        guide_id: int | None = None,
        site_id: int | None = None,
        status: ModerationStatus | str | None = None,
        week_start_date: date | None = None,
        page: int | None = None,
        limit: int | None = None,
    ) -> Page[ShiftSubmission]:
        stmt = select(ShiftSubmission)
        if guide_id is not None:
            stmt = stmt.where(ShiftSubmission.guide_id == guide_id)
        if site_id is not None:
            stmt = stmt.where(ShiftSubmission.site_id == site_id)
        if status:
            stmt = stmt.where(ShiftSubmission.status == _status_value(status))
        if week_start_date is not None:
            stmt = stmt.where(ShiftSubmission.week_start_date == week_start_date)

        return self._page(stmt, (ShiftSubmission.created_at.desc(), ShiftSubmission.id.desc()), page, limit)

    def active_schedules(
        self,
        *,
        site_id: int,
        statuses: Sequence[str],
        starting_on_or_before: date,
        guide_id: int | None = None,
    ) -> list[ShiftSubmission]:
        """Active submissions whose recurring schedule has started by the given date."""
        stmt = select(ShiftSubmission).where(
            ShiftSubmission.site_id == site_id,
            ShiftSubmission.is_active.is_(True),
            ShiftSubmission.status.in_(list(statuses)),
            ShiftSubmission.week_start_date <= starting_on_or_before,
        )
        if guide_id is not None:
            stmt = stmt.where(ShiftSubmission.guide_id == guide_id)
        return list(self.db.execute(stmt.order_by(ShiftSubmission.id.asc())).scalars().all())
