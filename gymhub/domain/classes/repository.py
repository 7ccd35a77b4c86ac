"""Class repository - Database operations for classes and bookings"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ...models import BookingStatus, ClassBooking, GymClass


class ClassRepository:
    """Repository for class and booking database operations"""

    @staticmethod
    def get_class_by_id(db: Session, class_id: int) -> Optional[GymClass]:
        return db.query(GymClass).filter(GymClass.id == class_id).first()

    @staticmethod
    def get_classes(
        db: Session,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        include_inactive: bool = False,
    ) -> list[GymClass]:
        query = db.query(GymClass)
        if not include_inactive:
            query = query.filter(GymClass.is_active.is_(True))
        if start:
            query = query.filter(GymClass.start_time >= start)
        if end:
            query = query.filter(GymClass.start_time < end)
        return query.order_by(GymClass.start_time, GymClass.id).all()

    @staticmethod
    def create_class(db: Session, **class_data) -> GymClass:
        gym_class = GymClass(**class_data)
        db.add(gym_class)
        db.commit()
        db.refresh(gym_class)
        return gym_class

    @staticmethod
    def reserve_spot(db: Session, class_id: int) -> bool:
        """
        Take one seat: UPDATE ... WHERE booked_count < capacity.
        Not committed - runs inside the caller's transaction.
        Returns False when the class is already full.
        """
        updated = (
            db.query(GymClass)
            .filter(GymClass.id == class_id, GymClass.booked_count < GymClass.capacity)
            .update(
                {GymClass.booked_count: GymClass.booked_count + 1},
                synchronize_session=False,
            )
        )
        return updated == 1

    @staticmethod
    def release_spot(db: Session, class_id: int) -> None:
        """Give one seat back. Not committed."""
        db.query(GymClass).filter(GymClass.id == class_id, GymClass.booked_count > 0).update(
            {GymClass.booked_count: GymClass.booked_count - 1},
            synchronize_session=False,
        )

    @staticmethod
    def get_booking_by_id(db: Session, booking_id: int) -> Optional[ClassBooking]:
        return db.query(ClassBooking).filter(ClassBooking.id == booking_id).first()

    @staticmethod
    def get_booking(db: Session, member_id: int, class_id: int) -> Optional[ClassBooking]:
        return (
            db.query(ClassBooking)
            .filter(ClassBooking.member_id == member_id, ClassBooking.class_id == class_id)
            .first()
        )

    @staticmethod
    def create_booking(db: Session, **booking_data) -> ClassBooking:
        """Insert a booking and flush; the caller commits"""
        booking = ClassBooking(**booking_data)
        db.add(booking)
        db.flush()
        return booking

    @staticmethod
    def set_booking_status(db: Session, booking_id: int, expected_status: str, status: str) -> bool:
        """Conditional status write; False when the booking was changed first. Not committed."""
        values = {ClassBooking.status: status}
        if status == BookingStatus.CONFIRMED:
            values[ClassBooking.checked_in_at] = None
        updated = (
            db.query(ClassBooking)
            .filter(ClassBooking.id == booking_id, ClassBooking.status == expected_status)
            .update(values, synchronize_session=False)
        )
        return updated == 1
