"""Membership domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, field_validator


class SubscribeRequest(BaseModel):
    """Schema for assigning a plan to a member"""

    member_id: int
    plan_id: int
    start_date: Optional[date] = None  # Defaults to today
    discount_code: Optional[str] = None

    @field_validator("discount_code")
    @classmethod
    def blank_code_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v


class RenewRequest(BaseModel):
    """Schema for renewing a lapsed subscription"""

    plan_id: Optional[int] = None  # Defaults to the lapsed subscription's plan
    discount_code: Optional[str] = None


class ChangePlanRequest(BaseModel):
    """Schema for switching the plan of a current subscription"""

    plan_id: int


class ExpireLapsedRequest(BaseModel):
    as_of: Optional[date] = None


class ExpireLapsedResponse(BaseModel):
    expired_count: int


class SubscriptionResponse(BaseModel):
    """Schema for subscription response"""

    id: int
    member_id: int
    plan_id: int
    plan_name: Optional[str] = None
    status: str
    start_date: date
    end_date: date
    duration_days: int
    original_price: Decimal
    discount_amount: Decimal
    final_price: Decimal
    discount_code: Optional[str] = None
    previous_subscription_id: Optional[int] = None
    frozen_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_subscription(cls, subscription) -> "SubscriptionResponse":
        return cls(
            id=subscription.id,
            member_id=subscription.member_id,
            plan_id=subscription.plan_id,
            plan_name=subscription.plan.name if subscription.plan else None,
            status=subscription.status,
            start_date=subscription.start_date,
            end_date=subscription.end_date,
            duration_days=subscription.duration_days,
            original_price=subscription.original_price,
            discount_amount=subscription.discount_amount,
            final_price=subscription.final_price,
            discount_code=subscription.discount_code.code if subscription.discount_code else None,
            previous_subscription_id=subscription.previous_subscription_id,
            frozen_at=subscription.frozen_at,
            cancelled_at=subscription.cancelled_at,
            created_at=subscription.created_at,
        )
