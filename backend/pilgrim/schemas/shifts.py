from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from pilgrim.models.enums import SubmissionType


class ShiftIn(BaseModel):
    day_of_week: int = Field(..., ge=0, le=6, description="0=Sunday .. 6=Saturday")
    start_time: dt.time
    end_time: dt.time


class ShiftSubmissionCreateIn(BaseModel):
    guide_id: int = Field(..., gt=0)
    site_id: int = Field(..., gt=0)
    week_start_date: dt.date
    submission_type: SubmissionType = SubmissionType.NEW
    shifts: List[ShiftIn] = Field(..., min_length=1)
    change_reason: Optional[str] = Field(default=None, max_length=1000)


class ShiftOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    day_of_week: int
    start_time: dt.time
    end_time: dt.time


class ShiftChangeOut(BaseModel):
    day_of_week: int
    old: Optional[dict[str, str]] = None
    new: Optional[dict[str, str]] = None
    is_changed: bool
    is_new: bool
    is_removed: bool


class ShiftSubmissionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    guide_id: int
    site_id: int
    submission_type: str
    week_start_date: dt.date
    status: str
    is_active: bool
    rejection_reason: str | None = None
    change_reason: str | None = None
    previous_submission_id: int | None = None
    total_shifts: int
    shifts: List[ShiftOut]
    changes: Optional[List[ShiftChangeOut]] = None
    created_at: dt.datetime
    reviewed_by_user_id: int | None = None
    reviewed_at: dt.datetime | None = None
    superseded_by_id: int | None = None
    superseded_at: dt.datetime | None = None


class TodayShiftOut(BaseModel):
    submission_id: int
    guide_id: int
    guide_name: str | None = None
    date: dt.date
    day_of_week: int
    start_time: dt.time
    end_time: dt.time


class CalendarEntryOut(BaseModel):
    date: dt.date
    submission_id: int
    guide_id: int
    status: str
    day_of_week: int
    start_time: dt.time
    end_time: dt.time
