"""Plan domain schemas - Pydantic models for validation"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class PlanCreate(BaseModel):
    """Schema for creating a membership plan"""

    name: str
    description: Optional[str] = None
    price: Decimal
    duration: str  # "MONTHLY" | "YEARLY" | "FIXED_DAYS"
    duration_days: Optional[int] = None  # Required when duration is FIXED_DAYS
    features: list[str]


class PlanUpdate(BaseModel):
    """Schema for a partial plan update"""

    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Decimal] = None
    duration: Optional[str] = None
    duration_days: Optional[int] = None
    features: Optional[list[str]] = None


class PlanResponse(BaseModel):
    """Schema for plan response"""

    id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    duration_kind: str
    duration_days: Optional[int] = None
    features: list[str]
    archived: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
