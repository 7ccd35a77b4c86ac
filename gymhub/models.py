import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_qr_token():
    """Generate a unique token printed on a member's check-in QR code"""
    return str(uuid.uuid4())


class DurationKind:
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"
    FIXED_DAYS = "FIXED_DAYS"

    ALL = (MONTHLY, YEARLY, FIXED_DAYS)


class SubscriptionStatus:
    ACTIVE = "ACTIVE"
    FROZEN = "FROZEN"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"

    # A member holds at most one subscription in one of these states
    CURRENT = (ACTIVE, FROZEN)
    TERMINAL = (EXPIRED, CANCELLED)


class DiscountKind:
    FIXED = "FIXED"
    PERCENT = "PERCENT"

    ALL = (FIXED, PERCENT)


class AttendanceType:
    GYM_VISIT = "GYM_VISIT"
    CLASS_ATTENDANCE = "CLASS_ATTENDANCE"

    ALL = (GYM_VISIT, CLASS_ATTENDANCE)


class BookingStatus:
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


class Member(Base):
    __tablename__ = "members"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50), nullable=True)
    qr_code_token = Column(
        String(36), unique=True, index=True, nullable=False, default=generate_qr_token
    )
    created_at = Column(DateTime, server_default=func.now())

    subscriptions = relationship(
        "Subscription", back_populates="member", order_by="Subscription.id.desc()"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class MembershipPlan(Base):
    __tablename__ = "membership_plans"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    duration_kind = Column(String(20), nullable=False)  # MONTHLY, YEARLY, FIXED_DAYS
    duration_days = Column(Integer, nullable=True)  # Only set for FIXED_DAYS
    features = Column(JSON, default=list, nullable=False)  # Ordered feature labels
    # Soft delete: archived plans stay referenced by historical subscriptions
    archived = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class DiscountCode(Base):
    __tablename__ = "discount_codes"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, index=True, nullable=False)  # Stored upper-cased
    description = Column(Text, nullable=True)
    kind = Column(String(10), nullable=False)  # FIXED, PERCENT
    value = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    starts_at = Column(DateTime, nullable=True)
    ends_at = Column(DateTime, nullable=True)
    max_redemptions = Column(Integer, nullable=True)  # None means unlimited
    used_count = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    plan_id = Column(Integer, ForeignKey("membership_plans.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=SubscriptionStatus.ACTIVE)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    duration_days = Column(Integer, nullable=False)  # Snapshot of the plan duration
    # Price snapshot - never recomputed from the live plan row
    original_price = Column(Numeric(10, 2), nullable=False)
    discount_amount = Column(Numeric(10, 2), nullable=False, default=0)
    final_price = Column(Numeric(10, 2), nullable=False)
    discount_code_id = Column(Integer, ForeignKey("discount_codes.id"), nullable=True)
    discount_kind = Column(String(10), nullable=True)  # Rule applied at subscribe time
    discount_value = Column(Numeric(10, 2), nullable=True)
    # Renewal chain: a record can be renewed at most once
    previous_subscription_id = Column(
        Integer, ForeignKey("subscriptions.id"), unique=True, nullable=True
    )
    version = Column(Integer, nullable=False, default=1)
    frozen_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    member = relationship("Member", back_populates="subscriptions")
    plan = relationship("MembershipPlan")
    discount_code = relationship("DiscountCode")

    __table_args__ = (
        Index(
            "uq_subscriptions_current_member",
            "member_id",
            unique=True,
            postgresql_where=text("status IN ('ACTIVE', 'FROZEN')"),
            sqlite_where=text("status IN ('ACTIVE', 'FROZEN')"),
        ),
        Index("ix_subscriptions_status_end_date", "status", "end_date"),
    )


class GymClass(Base):
    __tablename__ = "gym_classes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    instructor = Column(String(255), nullable=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    capacity = Column(Integer, nullable=False)
    booked_count = Column(Integer, default=0, nullable=False)  # CONFIRMED bookings, kept <= capacity
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    bookings = relationship("ClassBooking", back_populates="gym_class")


class ClassBooking(Base):
    __tablename__ = "class_bookings"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    class_id = Column(Integer, ForeignKey("gym_classes.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED)
    checked_in_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    gym_class = relationship("GymClass", back_populates="bookings")

    __table_args__ = (UniqueConstraint("member_id", "class_id", name="uq_booking_member_class"),)


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)
    type = Column(String(20), nullable=False)  # GYM_VISIT, CLASS_ATTENDANCE
    class_id = Column(Integer, ForeignKey("gym_classes.id"), nullable=True)
    check_in_time = Column(DateTime, nullable=False, index=True)
    check_out_time = Column(DateTime, nullable=True)

    member = relationship("Member")
    gym_class = relationship("GymClass")
