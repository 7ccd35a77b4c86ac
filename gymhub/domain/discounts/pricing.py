"""
Discount pricing - pure price computation, independent of persistence.

Money is handled as Decimal and rounded to cents (ROUND_HALF_UP). The final
price is derived from the rounded discount so that
final_price == original_price - discount_amount holds exactly.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ...models import DiscountKind
from ...shared.errors import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
HUNDRED = Decimal("100")


def to_money(value) -> Decimal:
    """Coerce a number to a cent-rounded Decimal"""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class DiscountRule:
    """A discount code's rule plus the window in which it may be redeemed"""

    kind: str
    value: Decimal
    code: Optional[str] = None
    is_active: bool = True
    starts_at: Optional[datetime] = None
    ends_at: Optional[datetime] = None
    max_redemptions: Optional[int] = None
    used_count: int = 0

    @classmethod
    def from_model(cls, discount_code) -> "DiscountRule":
        return cls(
            kind=discount_code.kind,
            value=Decimal(discount_code.value),
            code=discount_code.code,
            is_active=discount_code.is_active,
            starts_at=discount_code.starts_at,
            ends_at=discount_code.ends_at,
            max_redemptions=discount_code.max_redemptions,
            used_count=discount_code.used_count or 0,
        )


@dataclass(frozen=True)
class PriceBreakdown:
    original_price: Decimal
    discount_amount: Decimal
    final_price: Decimal


def ensure_redeemable(rule: DiscountRule, as_of: datetime) -> None:
    """Raise ValidationError with the reason a rule cannot be used right now"""
    if not rule.is_active:
        raise ValidationError("Invalid discount code: code is inactive")
    if rule.starts_at and as_of < rule.starts_at:
        raise ValidationError("Invalid discount code: code is not active yet")
    if rule.ends_at and as_of > rule.ends_at:
        raise ValidationError("Invalid discount code: code has expired")
    if rule.max_redemptions is not None and rule.used_count >= rule.max_redemptions:
        raise ValidationError("Invalid discount code: redemption limit reached")
    validate_rule(rule.kind, rule.value)


def validate_rule(kind: str, value: Decimal) -> None:
    if kind not in DiscountKind.ALL:
        raise ValidationError("Discount kind must be FIXED or PERCENT")
    if value is None or value < 0:
        raise ValidationError("Discount value must be zero or greater")
    if kind == DiscountKind.PERCENT and value > HUNDRED:
        raise ValidationError("Discount percent cannot exceed 100")


def discount_for(price: Decimal, kind: str, value: Decimal) -> Decimal:
    """Discount granted on a price, clamped so the final price is never negative"""
    price = to_money(price)
    if kind == DiscountKind.PERCENT:
        raw = price * Decimal(value) / HUNDRED
    else:
        raw = Decimal(value)
    return to_money(min(max(raw, ZERO), price))


def breakdown(price: Decimal, kind: Optional[str] = None, value: Optional[Decimal] = None) -> PriceBreakdown:
    """Build a price breakdown for a price and an optional (kind, value) rule"""
    original = to_money(price)
    if kind is None:
        return PriceBreakdown(original, ZERO, original)
    discount = discount_for(original, kind, value)
    return PriceBreakdown(original, discount, original - discount)


def resolve_discount(
    plan_price: Decimal,
    rule: Optional[DiscountRule] = None,
    as_of: Optional[datetime] = None,
) -> PriceBreakdown:
    """
    Price a plan with an optional discount rule.

    No rule means no discount. A rule that is inactive, outside its validity
    window or exhausted raises ValidationError instead of being ignored.
    """
    if plan_price is None or Decimal(plan_price) < 0:
        raise ValidationError("Plan price must be zero or greater")
    if rule is None:
        return breakdown(plan_price)

    ensure_redeemable(rule, as_of or datetime.utcnow())
    return breakdown(plan_price, rule.kind, rule.value)
