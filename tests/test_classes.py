from datetime import date, datetime, timedelta

import pytest

from gymhub.domain.classes.repository import ClassRepository
from gymhub.domain.classes.schemas import GymClassCreate
from gymhub.domain.classes.service import ClassService
from gymhub.shared.errors import ConflictError, NotFoundError, ValidationError

MONDAY_9AM = datetime(2025, 3, 3, 9, 0)


def class_input(name="Spin", start=MONDAY_9AM, capacity=2):
    return GymClassCreate(name=name, start_time=start, end_time=start + timedelta(minutes=45), capacity=capacity)


def test_create_and_list_classes(db):
    service = ClassService(db)
    later = service.create_class(class_input(name="Boxing", start=MONDAY_9AM + timedelta(days=1)))
    spin = service.create_class(class_input())

    listed = service.list_classes()
    assert [c["id"] for c in listed] == [spin["id"], later["id"]]
    assert listed[0]["spots_left"] == 2

    only_monday = service.list_classes(date(2025, 3, 3), date(2025, 3, 3))
    assert [c["name"] for c in only_monday] == ["Spin"]


def test_class_must_end_after_start(db):
    with pytest.raises(ValidationError):
        ClassService(db).create_class(
            GymClassCreate(name="Oops", start_time=MONDAY_9AM, end_time=MONDAY_9AM, capacity=5)
        )


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        class_input(capacity=0)


def test_booking_rules(db, make_member):
    service = ClassService(db)
    spin = service.create_class(class_input(capacity=1))
    first, second = make_member(), make_member()

    booking = service.book_class(spin["id"], first.id)
    assert booking.status == "CONFIRMED"

    with pytest.raises(ConflictError, match="already has a booking"):
        service.book_class(spin["id"], first.id)
    with pytest.raises(ConflictError, match="full capacity"):
        service.book_class(spin["id"], second.id)

    assert service.list_classes()[0]["spots_left"] == 0


def test_cancelled_booking_is_reconfirmed(db, make_member):
    service = ClassService(db)
    spin = service.create_class(class_input())
    member = make_member()

    booking = service.book_class(spin["id"], member.id)
    assert service.cancel_booking(booking.id).status == "CANCELLED"

    rebooked = service.book_class(spin["id"], member.id)
    assert rebooked.id == booking.id
    assert rebooked.status == "CONFIRMED"


def test_cancel_twice_conflicts(db, make_member):
    service = ClassService(db)
    booking = service.book_class(service.create_class(class_input())["id"], make_member().id)
    service.cancel_booking(booking.id)
    with pytest.raises(ConflictError, match="already cancelled"):
        service.cancel_booking(booking.id)


def test_inactive_or_unknown_class(db, make_member):
    service = ClassService(db)
    spin = service.create_class(class_input())
    service.get_class(spin["id"]).is_active = False
    db.commit()

    with pytest.raises(ValidationError, match="not active"):
        service.book_class(spin["id"], make_member().id)
    with pytest.raises(NotFoundError):
        service.book_class(999, make_member().id)
    with pytest.raises(NotFoundError):
        service.cancel_booking(999)


def test_reserve_spot_is_a_conditional_write(db):
    spin = ClassService(db).create_class(class_input(capacity=2))

    assert ClassRepository.reserve_spot(db, spin["id"]) is True
    assert ClassRepository.reserve_spot(db, spin["id"]) is True
    assert ClassRepository.reserve_spot(db, spin["id"]) is False
    db.commit()

    assert ClassRepository.get_class_by_id(db, spin["id"]).booked_count == 2


def test_seat_taken_by_another_request_blocks_booking(db, make_member):
    service = ClassService(db)
    spin = service.create_class(class_input(capacity=1))
    member = make_member()

    # a concurrent booking claims the last seat first
    assert ClassRepository.reserve_spot(db, spin["id"]) is True
    db.commit()

    with pytest.raises(ConflictError, match="full capacity"):
        service.book_class(spin["id"], member.id)
    assert ClassRepository.get_booking(db, member.id, spin["id"]) is None
    assert service.list_classes()[0]["booked"] == 1


def test_cancel_gives_the_seat_back(db, make_member):
    service = ClassService(db)
    spin = service.create_class(class_input(capacity=1))
    first, second = make_member(), make_member()

    booking = service.book_class(spin["id"], first.id)
    service.cancel_booking(booking.id)
    assert service.list_classes()[0]["spots_left"] == 1

    assert service.book_class(spin["id"], second.id).status == "CONFIRMED"
    with pytest.raises(ConflictError, match="full capacity"):
        service.book_class(spin["id"], first.id)
    assert service.list_classes()[0]["booked"] == 1
