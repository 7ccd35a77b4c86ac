"""Discount domain schemas - Pydantic models for validation"""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator


def to_naive_utc(v: Optional[datetime]) -> Optional[datetime]:
    """Validity windows are stored as naive UTC; convert offset-aware input"""
    if v is not None and v.tzinfo is not None:
        return v.astimezone(timezone.utc).replace(tzinfo=None)
    return v


class DiscountCodeCreate(BaseModel):
    """Schema for creating a discount code"""

    code: str
    description: Optional[str] = None
    kind: str  # "FIXED" | "PERCENT"
    value: Decimal
    is_active: bool = True
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    max_redemptions: Optional[int] = None

    @field_validator("starts_at", "ends_at")
    @classmethod
    def validate_window_bounds(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)

    @field_validator("max_redemptions")
    @classmethod
    def validate_max_redemptions(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("max_redemptions must be at least 1")
        return v


class DiscountCodeUpdate(BaseModel):
    """Schema for updating a discount code"""

    code: Optional[str] = None
    description: Optional[str] = None
    kind: Optional[str] = None
    value: Optional[Decimal] = None
    is_active: Optional[bool] = None
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    max_redemptions: Optional[int] = None

    @field_validator("starts_at", "ends_at")
    @classmethod
    def validate_window_bounds(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(v)

    @field_validator("max_redemptions")
    @classmethod
    def validate_max_redemptions(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("max_redemptions must be at least 1")
        return v


class DiscountCodeResponse(BaseModel):
    """Schema for discount code response"""

    id: int
    code: str
    description: Optional[str] = None
    kind: str
    value: Decimal
    is_active: bool
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    max_redemptions: Optional[int] = None
    used_count: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DiscountUsageItem(BaseModel):
    id: int
    code: str
    used_count: int
    total_discount: float


class PricePreviewResponse(BaseModel):
    """Schema for a discount preview on a plan"""

    plan_id: int
    original_price: Decimal
    discount_amount: Decimal
    final_price: Decimal
    discount_code: Optional[str] = None
