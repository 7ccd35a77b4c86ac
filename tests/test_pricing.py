from datetime import datetime
from decimal import Decimal

import pytest

from gymhub.domain.discounts.pricing import DiscountRule, breakdown, resolve_discount, to_money
from gymhub.shared.errors import ValidationError

NOW = datetime(2025, 1, 15, 12, 0)


def test_no_rule_means_no_discount():
    pricing = resolve_discount(Decimal("49.99"))
    assert pricing.original_price == Decimal("49.99")
    assert pricing.discount_amount == Decimal("0.00")
    assert pricing.final_price == Decimal("49.99")


def test_percent_discount_rounds_half_up_and_keeps_invariant():
    pricing = resolve_discount(Decimal("49.99"), DiscountRule(kind="PERCENT", value=Decimal("20")), NOW)
    assert pricing.discount_amount == Decimal("10.00")
    assert pricing.final_price == Decimal("39.99")
    assert pricing.original_price - pricing.discount_amount == pricing.final_price


def test_fixed_discount_is_clamped_to_price():
    pricing = resolve_discount(Decimal("25.00"), DiscountRule(kind="FIXED", value=Decimal("40")), NOW)
    assert pricing.discount_amount == Decimal("25.00")
    assert pricing.final_price == Decimal("0.00")


def test_hundred_percent_is_free():
    pricing = breakdown(Decimal("19.99"), "PERCENT", Decimal("100"))
    assert pricing.final_price == Decimal("0.00")


def test_percent_over_hundred_rejected():
    with pytest.raises(ValidationError):
        resolve_discount(Decimal("10"), DiscountRule(kind="PERCENT", value=Decimal("120")), NOW)


@pytest.mark.parametrize(
    "rule, reason",
    [
        (DiscountRule(kind="FIXED", value=Decimal("5"), is_active=False), "inactive"),
        (DiscountRule(kind="FIXED", value=Decimal("5"), starts_at=datetime(2025, 2, 1)), "not active yet"),
        (DiscountRule(kind="FIXED", value=Decimal("5"), ends_at=datetime(2025, 1, 1)), "expired"),
        (DiscountRule(kind="FIXED", value=Decimal("5"), max_redemptions=3, used_count=3), "limit"),
    ],
)
def test_unusable_rule_is_rejected_with_reason(rule, reason):
    with pytest.raises(ValidationError) as exc:
        resolve_discount(Decimal("30"), rule, NOW)
    assert exc.value.detail.startswith("Invalid discount code")
    assert reason in exc.value.detail


def test_negative_price_rejected():
    with pytest.raises(ValidationError):
        resolve_discount(Decimal("-1"))


def test_to_money_rounds_half_up():
    assert to_money(Decimal("0.005")) == Decimal("0.01")
    assert to_money(2.675) == Decimal("2.68")
