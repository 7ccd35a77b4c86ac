"""Report repository - Read-only aggregate queries"""

from datetime import date, datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import (
    AttendanceRecord,
    BookingStatus,
    ClassBooking,
    GymClass,
    MembershipPlan,
    Subscription,
    SubscriptionStatus,
)


class ReportRepository:
    """Repository for reporting queries"""

    @staticmethod
    def get_revenue_by_plan(db: Session, start: datetime, end: datetime) -> list:
        """(plan_id, plan_name, count, original, discount, final) for subscriptions created in [start, end)"""
        return (
            db.query(
                MembershipPlan.id,
                MembershipPlan.name,
                func.count(Subscription.id),
                func.sum(Subscription.original_price),
                func.sum(Subscription.discount_amount),
                func.sum(Subscription.final_price),
            )
            .join(MembershipPlan, Subscription.plan_id == MembershipPlan.id)
            .filter(Subscription.created_at >= start, Subscription.created_at < end)
            .group_by(MembershipPlan.id, MembershipPlan.name)
            .order_by(MembershipPlan.name)
            .all()
        )

    @staticmethod
    def get_class_occupancy(db: Session, start: datetime, end: datetime) -> list:
        """(class, confirmed_count) for classes starting in [start, end)"""
        confirmed = func.count(ClassBooking.id)
        return (
            db.query(GymClass, confirmed)
            .outerjoin(
                ClassBooking,
                (ClassBooking.class_id == GymClass.id)
                & (ClassBooking.status == BookingStatus.CONFIRMED),
            )
            .filter(GymClass.start_time >= start, GymClass.start_time < end)
            .group_by(GymClass.id)
            .order_by(GymClass.start_time, GymClass.id)
            .all()
        )

    @staticmethod
    def get_member_check_ins(db: Session, member_id: int, start: datetime, end: datetime) -> list:
        """(type, check_in_time) rows for one member in [start, end)"""
        return (
            db.query(AttendanceRecord.type, AttendanceRecord.check_in_time)
            .filter(
                AttendanceRecord.member_id == member_id,
                AttendanceRecord.check_in_time >= start,
                AttendanceRecord.check_in_time < end,
            )
            .order_by(AttendanceRecord.check_in_time)
            .all()
        )

    @staticmethod
    def count_by_status(db: Session) -> dict[str, int]:
        rows = (
            db.query(Subscription.status, func.count(Subscription.id))
            .group_by(Subscription.status)
            .all()
        )
        return {status: count for status, count in rows}

    @staticmethod
    def get_expiring(db: Session, as_of: date, until: date) -> list[Subscription]:
        """Current subscriptions ending between as_of and until, soonest first"""
        return (
            db.query(Subscription)
            .filter(
                Subscription.status.in_(SubscriptionStatus.CURRENT),
                Subscription.end_date >= as_of,
                Subscription.end_date <= until,
            )
            .order_by(Subscription.end_date, Subscription.id)
            .all()
        )
