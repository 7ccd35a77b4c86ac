from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from gymhub.domain.discounts.repository import DiscountRepository
from gymhub.domain.discounts.schemas import DiscountCodeCreate, DiscountCodeUpdate
from gymhub.domain.discounts.service import DiscountCodeService
from gymhub.shared.errors import ConflictError, NotFoundError, ValidationError


def test_codes_are_stored_upper_cased_and_resolved_case_insensitively(db, make_code):
    created = make_code(code="  spring25 ", kind="percent", value="25")
    assert created.code == "SPRING25"
    assert created.kind == "PERCENT"
    assert DiscountCodeService(db).resolve_discount_code("Spring25").id == created.id


def test_unknown_code_is_invalid(db):
    with pytest.raises(ValidationError, match="Invalid discount code"):
        DiscountCodeService(db).resolve_discount_code("NOPE")


def test_duplicate_code_conflicts(make_code):
    make_code(code="SAVE10")
    with pytest.raises(ConflictError):
        make_code(code="save10")


@pytest.mark.parametrize(
    "kind, value",
    [("PERCENT", "101"), ("FIXED", "-1"), ("BOGO", "5")],
)
def test_invalid_rule_rejected(make_code, kind, value):
    with pytest.raises(ValidationError):
        make_code(code="BAD", kind=kind, value=value)


def test_window_must_end_after_start(db):
    start = datetime(2025, 1, 10)
    with pytest.raises(ValidationError):
        DiscountCodeService(db).create_code(
            DiscountCodeCreate(
                code="WINDOW",
                kind="FIXED",
                value=Decimal("5"),
                starts_at=start,
                ends_at=start - timedelta(days=1),
            )
        )


def test_price_without_code(db):
    pricing, code = DiscountCodeService(db).price(Decimal("49.99"))
    assert code is None
    assert pricing.final_price == Decimal("49.99")


def test_price_with_inactive_code_is_rejected(db, make_code):
    make_code(code="OFF", is_active=False)
    with pytest.raises(ValidationError, match="inactive"):
        DiscountCodeService(db).price(Decimal("49.99"), "OFF")


def test_redemption_limit_is_enforced_by_conditional_update(db, make_code):
    code = make_code(code="ONCE", max_redemptions=1)
    assert DiscountRepository.increment_usage(db, code.id) is True
    assert DiscountRepository.increment_usage(db, code.id) is False
    db.commit()
    db.refresh(code)
    assert code.used_count == 1


def test_assign_counts_redemption_and_limit_blocks_next(db, make_code, make_member, make_plan, memberships):
    plan = make_plan()
    code = make_code(code="ONCE", max_redemptions=1)

    memberships.assign(make_member().id, plan.id, discount_code="once")
    db.refresh(code)
    assert code.used_count == 1

    with pytest.raises(ValidationError, match="redemption limit"):
        memberships.assign(make_member().id, plan.id, discount_code="ONCE")


def test_update_code(db, make_code):
    code = make_code(code="SAVE20", value="20")
    updated = DiscountCodeService(db).update_code(code.id, DiscountCodeUpdate(value=Decimal("15")))
    assert updated.value == Decimal("15.00")
    assert updated.kind == "PERCENT"


def test_update_with_offset_aware_end_compares_against_naive_start(db, make_code):
    code = make_code(code="WINDOW", starts_at=datetime(2025, 1, 10, 12, 0))
    service = DiscountCodeService(db)

    updated = service.update_code(
        code.id, DiscountCodeUpdate(ends_at=datetime(2025, 1, 20, 9, 0, tzinfo=timezone(timedelta(hours=2))))
    )
    assert updated.ends_at == datetime(2025, 1, 20, 7, 0)

    with pytest.raises(ValidationError, match="end after it starts"):
        service.update_code(code.id, DiscountCodeUpdate(ends_at="2025-01-10T13:00:00+02:00"))


def test_create_with_mixed_offsets_is_normalised_to_utc(db):
    created = DiscountCodeService(db).create_code(
        DiscountCodeCreate(
            code="MIXED",
            kind="FIXED",
            value=Decimal("5"),
            starts_at=datetime(2025, 1, 10),
            ends_at="2025-01-11T00:00:00Z",
        )
    )
    assert created.starts_at == datetime(2025, 1, 10)
    assert created.ends_at == datetime(2025, 1, 11)
    assert created.ends_at.tzinfo is None


def test_update_rejects_non_positive_max_redemptions():
    with pytest.raises(PydanticValidationError, match="at least 1"):
        DiscountCodeUpdate(max_redemptions=0)
    assert DiscountCodeUpdate(max_redemptions=None).max_redemptions is None


def test_delete_unused_code(db, make_code):
    service = DiscountCodeService(db)
    code = make_code(code="UNUSED")
    service.delete_code(code.id)
    with pytest.raises(NotFoundError):
        service.get_code(code.id)


def test_delete_redeemed_code_conflicts(db, make_code, make_member, make_plan, memberships):
    code = make_code(code="USED")
    memberships.assign(make_member().id, make_plan().id, discount_code="USED")
    with pytest.raises(ConflictError):
        DiscountCodeService(db).delete_code(code.id)


def test_usage_report_sums_granted_discount(db, make_code, make_member, make_plan, memberships):
    make_code(code="SAVE20")
    plan = make_plan(price="49.99")
    memberships.assign(make_member().id, plan.id, discount_code="SAVE20")
    memberships.assign(make_member().id, plan.id, discount_code="SAVE20")

    usage = DiscountCodeService(db).get_usage()
    assert usage == [{"id": usage[0]["id"], "code": "SAVE20", "used_count": 2, "total_discount": 20.0}]
