"""Class domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator


class GymClassCreate(BaseModel):
    """Schema for scheduling a class"""

    name: str
    instructor: Optional[str] = None
    start_time: datetime
    end_time: datetime
    capacity: int

    @field_validator("capacity")
    @classmethod
    def validate_capacity(cls, v):
        if v < 1:
            raise ValueError("Capacity must be at least 1")
        return v


class GymClassResponse(BaseModel):
    id: int
    name: str
    instructor: Optional[str] = None
    start_time: datetime
    end_time: datetime
    capacity: int
    is_active: bool
    booked: int = 0
    spots_left: int = 0

    class Config:
        from_attributes = True


class BookingRequest(BaseModel):
    member_id: int


class BookingResponse(BaseModel):
    id: int
    member_id: int
    class_id: int
    status: str
    checked_in_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
