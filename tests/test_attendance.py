from datetime import date, datetime, timedelta

import pytest

from gymhub.domain.attendance.repository import AttendanceRepository
from gymhub.domain.attendance.service import AttendanceService
from gymhub.domain.classes.schemas import GymClassCreate
from gymhub.domain.classes.service import ClassService
from gymhub.shared.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError


@pytest.fixture()
def attendance(db, notifier):
    return AttendanceService(db, notifier=notifier)


@pytest.fixture()
def yoga(db):
    start = datetime.utcnow().replace(minute=0, second=0, microsecond=0)
    return ClassService(db).create_class(
        GymClassCreate(name="Yoga", start_time=start, end_time=start + timedelta(hours=1), capacity=10)
    )


def test_active_member_checks_in(attendance, active_member, notifier):
    member, subscription = active_member

    record = attendance.check_in(member.id)

    assert record.member_id == member.id
    assert record.type == "GYM_VISIT"
    assert record.class_id is None
    assert record.check_in_time is not None
    assert record.check_out_time is None
    assert notifier.events[-1].type == "attendance.checked_in"
    assert notifier.events[-1].subscription_id == subscription.id


def test_frozen_member_is_forbidden(attendance, active_member, memberships):
    member, subscription = active_member
    memberships.freeze(subscription.id)

    assert attendance.is_entitled(member.id) is False
    with pytest.raises(ForbiddenError, match="frozen"):
        attendance.check_in(member.id)


def test_member_without_membership_is_forbidden(attendance, make_member):
    with pytest.raises(ForbiddenError, match="No active membership"):
        attendance.check_in(make_member().id)


def test_unknown_member_not_found(attendance):
    with pytest.raises(NotFoundError):
        attendance.check_in(4242)


def test_entitlement_respects_dates(attendance, make_member, make_plan, memberships):
    member = make_member()
    memberships.assign(member.id, make_plan().id, date(2025, 1, 1))  # ends 2025-01-31

    assert attendance.is_entitled(member.id, date(2025, 1, 1)) is True
    assert attendance.is_entitled(member.id, date(2025, 1, 31)) is True
    assert attendance.is_entitled(member.id, date(2024, 12, 31)) is False
    with pytest.raises(ForbiddenError, match="expired"):
        attendance.assert_entitled(member.id, date(2025, 2, 1))


def test_entitlement_status(attendance, active_member):
    member, subscription = active_member
    status = attendance.entitlement_status(member.id)
    assert status == {
        "member_id": member.id,
        "entitled": True,
        "subscription_id": subscription.id,
        "status": "ACTIVE",
        "reason": None,
    }


def test_class_attendance_needs_class_id(attendance, active_member):
    member, _ = active_member
    with pytest.raises(ValidationError, match="Class ID is required"):
        attendance.check_in(member.id, "CLASS_ATTENDANCE")


def test_class_attendance_needs_confirmed_booking(db, attendance, active_member, yoga):
    member, _ = active_member
    with pytest.raises(ValidationError, match="no confirmed booking"):
        attendance.check_in(member.id, "CLASS_ATTENDANCE", yoga["id"])

    booking = ClassService(db).book_class(yoga["id"], member.id)
    ClassService(db).cancel_booking(booking.id)
    with pytest.raises(ValidationError):
        attendance.check_in(member.id, "CLASS_ATTENDANCE", yoga["id"])


def test_class_attendance_stamps_booking(db, attendance, active_member, yoga):
    member, _ = active_member
    booking = ClassService(db).book_class(yoga["id"], member.id)

    record = attendance.check_in(member.id, "CLASS_ATTENDANCE", yoga["id"])

    db.refresh(booking)
    assert record.type == "CLASS_ATTENDANCE"
    assert record.class_id == yoga["id"]
    assert booking.checked_in_at == record.check_in_time


def test_qr_check_in(attendance, active_member):
    member, _ = active_member
    record = attendance.qr_check_in(member.qr_code_token)
    assert record.member_id == member.id
    assert record.type == "GYM_VISIT"

    with pytest.raises(NotFoundError, match="Invalid QR code"):
        attendance.qr_check_in("not-a-token")


def test_check_out_once(attendance, active_member, notifier):
    member, _ = active_member
    record = attendance.check_in(member.id)

    closed = attendance.check_out(record.id)
    assert closed.check_out_time is not None
    assert notifier.events[-1].type == "attendance.checked_out"

    with pytest.raises(ConflictError):
        attendance.check_out(record.id)
    with pytest.raises(NotFoundError):
        attendance.check_out(9999)


def test_close_record_is_conditional(db, attendance, active_member):
    member, _ = active_member
    record = attendance.check_in(member.id)
    now = datetime.utcnow()

    assert AttendanceRepository.close_record(db, record.id, now) is True
    assert AttendanceRepository.close_record(db, record.id, now) is False


def test_list_attendance_filters_and_paginates(attendance, active_member, make_member):
    member, _ = active_member
    for _ in range(3):
        attendance.check_in(member.id)

    result = attendance.list_attendance(member_id=member.id, page=1, limit=2)
    assert len(result["records"]) == 2
    assert result["pagination"] == {"page": 1, "limit": 2, "total": 3, "total_pages": 2}

    today = datetime.utcnow().date()
    assert attendance.list_attendance(start_date=today, end_date=today)["pagination"]["total"] == 3
    assert attendance.list_attendance(attendance_type="class_attendance")["pagination"]["total"] == 0
    assert attendance.list_attendance(member_id=make_member().id)["records"] == []

    with pytest.raises(ValidationError):
        attendance.list_attendance(start_date=today, end_date=today - timedelta(days=1))
