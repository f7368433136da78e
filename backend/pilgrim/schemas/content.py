from __future__ import annotations

import datetime as dt
from typing import Any, Optional, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from pilgrim.models.enums import MediaType, NearbyPlaceCategory


# ---------- Payloads (one per content kind) ----------

class _Payload(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class MediaPayload(_Payload):
    url: str = Field(..., min_length=1, max_length=1000)
    type: MediaType
    caption: str = Field("", max_length=1000)


class MassSchedulePayload(_Payload):
    days_of_week: List[int] = Field(..., min_length=1)  # 0=Sunday .. 6=Saturday
    time: dt.time
    note: str = Field("", max_length=500)

    @field_validator("days_of_week")
    @classmethod
    def _days(cls, v: list[int]) -> list[int]:
        for d in v:
            if isinstance(d, bool) or not 0 <= d <= 6:
                raise ValueError("days_of_week entries must be 0-6 (0=Sunday)")
        return sorted(set(v))


class EventPayload(_Payload):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    start_date: dt.date
    end_date: dt.date
    start_time: dt.time
    end_time: dt.time
    location: str = Field("", max_length=300)
    banner_url: Optional[str] = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def _range(self) -> "EventPayload":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        if self.end_date == self.start_date and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time for a single-day event")
        return self


class NearbyPlacePayload(_Payload):
    name: str = Field(..., min_length=1, max_length=200)
    category: NearbyPlaceCategory
    address: str = Field(..., min_length=1, max_length=300)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    distance_meters: int = Field(0, ge=0)
    phone: Optional[str] = Field(default=None, max_length=32)
    description: Optional[str] = Field(default=None, max_length=2000)


# ---------- Output ----------

class ContentItemOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    site_id: int
    kind: str
    status: str
    rejection_reason: str | None = None
    is_active: bool
    payload: dict[str, Any]
    created_by_user_id: int
    created_at: dt.datetime
    updated_at: dt.datetime | None = None
    reviewed_by_user_id: int | None = None
    reviewed_at: dt.datetime | None = None
