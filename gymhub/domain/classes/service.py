"""Class service - Scheduling classes and managing member bookings"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import BookingStatus, ClassBooking, GymClass
from ...shared.errors import ConflictError, NotFoundError, ValidationError
from ...shared.validators import require_text
from ..members.service import MemberService
from .repository import ClassRepository
from .schemas import GymClassCreate

logger = logging.getLogger(__name__)


class ClassService:
    """Service layer for classes and bookings"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ClassRepository()
        self.members = MemberService(db)

    def get_class(self, class_id: int) -> GymClass:
        gym_class = self.repo.get_class_by_id(self.db, class_id)
        if not gym_class:
            raise NotFoundError(f"Class with ID {class_id} not found")
        return gym_class

    def create_class(self, data: GymClassCreate) -> dict:
        name = require_text(data.name, "Class name")
        if data.end_time <= data.start_time:
            raise ValidationError("Class must end after it starts")

        gym_class = self.repo.create_class(
            self.db,
            name=name,
            instructor=data.instructor.strip() if data.instructor else None,
            start_time=data.start_time,
            end_time=data.end_time,
            capacity=data.capacity,
        )
        logger.info(f"✅ Scheduled class {gym_class.id} '{gym_class.name}' at {gym_class.start_time}")
        return self._with_availability(gym_class)

    def list_classes(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        include_inactive: bool = False,
    ) -> list[dict]:
        start = datetime.combine(start_date, datetime.min.time()) if start_date else None
        end = datetime.combine(end_date + timedelta(days=1), datetime.min.time()) if end_date else None

        classes = self.repo.get_classes(self.db, start, end, include_inactive)
        return [self._with_availability(c) for c in classes]

    @staticmethod
    def _with_availability(gym_class: GymClass) -> dict:
        return {
            "id": gym_class.id,
            "name": gym_class.name,
            "instructor": gym_class.instructor,
            "start_time": gym_class.start_time,
            "end_time": gym_class.end_time,
            "capacity": gym_class.capacity,
            "is_active": gym_class.is_active,
            "booked": gym_class.booked_count,
            "spots_left": max(gym_class.capacity - gym_class.booked_count, 0),
        }

    def book_class(self, class_id: int, member_id: int) -> ClassBooking:
        member = self.members.get_member(member_id)
        gym_class = self.get_class(class_id)
        if not gym_class.is_active:
            raise ValidationError("Class is not active")

        existing = self.repo.get_booking(self.db, member.id, gym_class.id)
        if existing and existing.status == BookingStatus.CONFIRMED:
            raise ConflictError("Member already has a booking for this class")

        # Seat and booking are written in one transaction
        if not self.repo.reserve_spot(self.db, gym_class.id):
            self.db.rollback()
            logger.warning(f"⚠️ Class {gym_class.id} is full, booking for member {member.id} rejected")
            raise ConflictError("Class is at full capacity")

        try:
            if existing:
                if not self.repo.set_booking_status(
                    self.db, existing.id, BookingStatus.CANCELLED, BookingStatus.CONFIRMED
                ):
                    raise ConflictError("Member already has a booking for this class")
                booking = existing
            else:
                booking = self.repo.create_booking(
                    self.db,
                    member_id=member.id,
                    class_id=gym_class.id,
                    status=BookingStatus.CONFIRMED,
                )
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Member already has a booking for this class")
        except ConflictError:
            self.db.rollback()
            raise

        self.db.refresh(booking)
        logger.info(f"📅 Member {member.id} booked class {gym_class.id} (booking {booking.id})")
        return booking

    def cancel_booking(self, booking_id: int) -> ClassBooking:
        booking = self.repo.get_booking_by_id(self.db, booking_id)
        if not booking:
            raise NotFoundError(f"Booking with ID {booking_id} not found")
        if booking.status == BookingStatus.CANCELLED:
            raise ConflictError("Booking is already cancelled")

        if not self.repo.set_booking_status(
            self.db, booking.id, BookingStatus.CONFIRMED, BookingStatus.CANCELLED
        ):
            self.db.rollback()
            raise ConflictError("Booking is already cancelled")
        self.repo.release_spot(self.db, booking.class_id)
        self.db.commit()

        self.db.refresh(booking)
        logger.info(f"🗑️ Booking {booking.id} cancelled")
        return booking
