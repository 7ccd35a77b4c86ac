"""
Attendance service - Entitlement checks, check-in and check-out

A member may enter only while their current subscription is ACTIVE and the
day falls inside its start/end dates. FROZEN memberships keep their dates but
grant no access until unfrozen.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from ...config import NOTIFY_ATTENDANCE_EVENTS
from ...models import AttendanceRecord, AttendanceType, Subscription, SubscriptionStatus
from ...services.notification_service import (
    MembershipEvent,
    NotificationService,
    get_notification_service,
)
from ...shared.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from ...shared.schemas import paginate_meta
from ..members.service import MemberService
from ..memberships.repository import MembershipRepository
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


class AttendanceService:
    """Service layer for attendance"""

    def __init__(
        self,
        db: Session,
        notifier: Optional[NotificationService] = None,
        background_tasks: Optional[BackgroundTasks] = None,
    ):
        self.db = db
        self.repo = AttendanceRepository()
        self.memberships = MembershipRepository()
        self.members = MemberService(db)
        self.notifier = notifier or get_notification_service()
        # Set by request handlers: delivery then runs after the response is sent
        self.background_tasks = background_tasks

    # ------------------------------------------------------------------
    # Entitlement
    # ------------------------------------------------------------------

    def _entitlement(self, member_id: int, as_of: date) -> tuple[Optional[Subscription], Optional[str]]:
        """The current subscription and, when access is refused, the reason"""
        subscription = self.memberships.get_current_subscription(self.db, member_id)
        if not subscription:
            return None, "No active membership"
        if subscription.status == SubscriptionStatus.FROZEN:
            return subscription, "Membership is frozen"
        if as_of < subscription.start_date:
            return subscription, "Membership has not started yet"
        if as_of > subscription.end_date:
            return subscription, "Membership has expired"
        return subscription, None

    def assert_entitled(self, member_id: int, as_of: Optional[date] = None) -> Subscription:
        """Raise ForbiddenError unless the member may use the gym on as_of"""
        as_of = as_of or datetime.utcnow().date()
        subscription, reason = self._entitlement(member_id, as_of)
        if reason:
            logger.warning(f"🚫 Member {member_id} not entitled on {as_of}: {reason}")
            raise ForbiddenError(reason)
        return subscription

    def is_entitled(self, member_id: int, as_of: Optional[date] = None) -> bool:
        as_of = as_of or datetime.utcnow().date()
        _, reason = self._entitlement(member_id, as_of)
        return reason is None

    def entitlement_status(self, member_id: int, as_of: Optional[date] = None) -> dict:
        member = self.members.get_member(member_id)
        subscription, reason = self._entitlement(member.id, as_of or datetime.utcnow().date())
        return {
            "member_id": member.id,
            "entitled": reason is None,
            "subscription_id": subscription.id if subscription else None,
            "status": subscription.status if subscription else None,
            "reason": reason,
        }

    # ------------------------------------------------------------------
    # Check-in / check-out
    # ------------------------------------------------------------------

    def check_in(
        self,
        member_id: int,
        attendance_type: str = AttendanceType.GYM_VISIT,
        class_id: Optional[int] = None,
    ) -> AttendanceRecord:
        member = self.members.get_member(member_id)
        if attendance_type not in AttendanceType.ALL:
            raise ValidationError(f"Attendance type must be one of: {', '.join(AttendanceType.ALL)}")

        now = datetime.utcnow()
        subscription = self.assert_entitled(member.id, now.date())

        booking = None
        if attendance_type == AttendanceType.CLASS_ATTENDANCE:
            if not class_id:
                raise ValidationError("Class ID is required for class attendance")
            booking = self.repo.get_confirmed_booking(self.db, member.id, class_id)
            if not booking:
                raise ValidationError("Member has no confirmed booking for this class")
        else:
            class_id = None

        record = self.repo.create_record(
            self.db,
            booking=booking,
            member_id=member.id,
            type=attendance_type,
            class_id=class_id,
            check_in_time=now,
            check_out_time=None,
        )

        logger.info(f"✅ Member {member.id} checked in ({attendance_type}), record {record.id}")
        self._notify(
            MembershipEvent(
                type="attendance.checked_in",
                member_id=member.id,
                subscription_id=subscription.id,
                payload={"attendance_id": record.id, "type": attendance_type, "class_id": class_id},
            )
        )
        return record

    def qr_check_in(self, token: str) -> AttendanceRecord:
        """Gym visit check-in from the token printed on a member's QR code"""
        member = self.members.get_member_by_qr_token(token)
        return self.check_in(member.id, AttendanceType.GYM_VISIT)

    def check_out(self, attendance_id: int) -> AttendanceRecord:
        record = self.repo.get_record_by_id(self.db, attendance_id)
        if not record:
            raise NotFoundError(f"Attendance record with ID {attendance_id} not found")
        if record.check_out_time is not None:
            raise ConflictError("Member has already checked out")

        if not self.repo.close_record(self.db, record.id, datetime.utcnow()):
            raise ConflictError("Member has already checked out")

        self.db.refresh(record)
        logger.info(f"👋 Member {record.member_id} checked out, record {record.id}")
        self._notify(
            MembershipEvent(
                type="attendance.checked_out",
                member_id=record.member_id,
                payload={"attendance_id": record.id},
            )
        )
        return record

    def list_attendance(
        self,
        member_id: Optional[int] = None,
        attendance_type: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        page: int = 1,
        limit: int = 50,
    ) -> dict:
        """Paginated attendance; the date range is inclusive on both ends"""
        if start_date and end_date and start_date > end_date:
            raise ValidationError("Start date must be on or before end date")

        start = datetime.combine(start_date, datetime.min.time()) if start_date else None
        end = datetime.combine(end_date + timedelta(days=1), datetime.min.time()) if end_date else None

        records, total = self.repo.get_records(
            self.db,
            member_id=member_id,
            attendance_type=attendance_type.upper() if attendance_type else None,
            start=start,
            end=end,
            skip=(page - 1) * limit,
            limit=limit,
        )
        return {"records": records, "pagination": paginate_meta(page, limit, total)}

    def _notify(self, event: MembershipEvent) -> None:
        if not NOTIFY_ATTENDANCE_EVENTS:
            return
        if self.background_tasks is not None:
            self.background_tasks.add_task(self.notifier.notify, event)
            return
        try:
            self.notifier.notify_sync(event)
        except Exception as e:
            logger.error(f"❌ Notification for {event.type} failed: {e}")
