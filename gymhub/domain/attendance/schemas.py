"""Attendance domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...models import AttendanceType
from ...shared.schemas import Pagination


class CheckInRequest(BaseModel):
    member_id: int
    type: str = AttendanceType.GYM_VISIT
    class_id: Optional[int] = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        v = (v or "").strip().upper()
        if v not in AttendanceType.ALL:
            raise ValueError(f"Attendance type must be one of: {', '.join(AttendanceType.ALL)}")
        return v


class QrCheckInRequest(BaseModel):
    token: str


class AttendanceResponse(BaseModel):
    id: int
    member_id: int
    type: str
    class_id: Optional[int] = None
    check_in_time: datetime
    check_out_time: Optional[datetime] = None

    class Config:
        from_attributes = True


class AttendanceListResponse(BaseModel):
    records: list[AttendanceResponse]
    pagination: Pagination
