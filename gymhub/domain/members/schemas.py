"""Member domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_email, validate_phone


class MemberCreate(BaseModel):
    """Schema for registering a member"""

    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        return validate_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone_field(cls, v):
        if v:
            return validate_phone(v)
        return v


class MemberResponse(BaseModel):
    """Schema for member response"""

    id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str] = None
    qr_code_token: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EntitlementResponse(BaseModel):
    member_id: int
    entitled: bool
    subscription_id: Optional[int] = None
    status: Optional[str] = None
    reason: Optional[str] = None
