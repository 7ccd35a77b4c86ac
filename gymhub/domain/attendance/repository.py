"""Attendance repository - Database operations for check-ins"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import AttendanceRecord, BookingStatus, ClassBooking


class AttendanceRepository:
    """Repository for attendance database operations"""

    @staticmethod
    def get_record_by_id(db: Session, record_id: int) -> Optional[AttendanceRecord]:
        return db.query(AttendanceRecord).filter(AttendanceRecord.id == record_id).first()

    @staticmethod
    def get_confirmed_booking(db: Session, member_id: int, class_id: int) -> Optional[ClassBooking]:
        return (
            db.query(ClassBooking)
            .filter(
                ClassBooking.member_id == member_id,
                ClassBooking.class_id == class_id,
                ClassBooking.status == BookingStatus.CONFIRMED,
            )
            .first()
        )

    @staticmethod
    def create_record(db: Session, booking: Optional[ClassBooking] = None, **record_data) -> AttendanceRecord:
        """Insert an attendance record, stamping the class booking in the same commit"""
        record = AttendanceRecord(**record_data)
        db.add(record)
        if booking is not None:
            booking.checked_in_at = record.check_in_time
        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def close_record(db: Session, record_id: int, check_out_time: datetime) -> bool:
        """
        UPDATE ... SET check_out_time = ? WHERE id = ? AND check_out_time IS NULL
        Returns False when the record was already checked out.
        """
        updated = (
            db.query(AttendanceRecord)
            .filter(
                AttendanceRecord.id == record_id,
                AttendanceRecord.check_out_time.is_(None),
            )
            .update({AttendanceRecord.check_out_time: check_out_time}, synchronize_session=False)
        )
        db.commit()
        return updated == 1

    @staticmethod
    def get_records(
        db: Session,
        member_id: Optional[int] = None,
        attendance_type: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> tuple[list[AttendanceRecord], int]:
        """Filtered attendance records, newest first, with the total count"""
        query = db.query(AttendanceRecord)

        if member_id is not None:
            query = query.filter(AttendanceRecord.member_id == member_id)
        if attendance_type:
            query = query.filter(AttendanceRecord.type == attendance_type)
        if start:
            query = query.filter(AttendanceRecord.check_in_time >= start)
        if end:
            query = query.filter(AttendanceRecord.check_in_time < end)

        total = query.count()
        records = (
            query.options(joinedload(AttendanceRecord.gym_class))
            .order_by(AttendanceRecord.check_in_time.desc(), AttendanceRecord.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return records, total
