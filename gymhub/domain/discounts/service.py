"""Discount service - Discount code lookup, pricing and administration"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import DiscountCode
from ...shared.errors import ConflictError, NotFoundError, ValidationError
from ...shared.validators import normalize_code, require_text
from .pricing import DiscountRule, PriceBreakdown, resolve_discount, to_money, validate_rule
from .repository import DiscountRepository
from .schemas import DiscountCodeCreate, DiscountCodeUpdate

logger = logging.getLogger(__name__)


class DiscountCodeService:
    """Service layer for discount codes"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DiscountRepository()

    # ------------------------------------------------------------------
    # Resolution (used by the subscription lifecycle)
    # ------------------------------------------------------------------

    def resolve_discount_code(self, code: str) -> DiscountCode:
        """Look a code up by its string; unknown codes are rejected"""
        discount_code = self.repo.get_code(self.db, normalize_code(code))
        if not discount_code:
            raise ValidationError("Invalid discount code")
        return discount_code

    def price(
        self,
        plan_price: Decimal,
        code: Optional[str] = None,
        as_of: Optional[datetime] = None,
    ) -> tuple[PriceBreakdown, Optional[DiscountCode]]:
        """Price a plan with an optional code string, without redeeming it"""
        if not code or not code.strip():
            return resolve_discount(plan_price), None

        discount_code = self.resolve_discount_code(code)
        pricing = resolve_discount(plan_price, DiscountRule.from_model(discount_code), as_of)
        return pricing, discount_code

    def redeem(self, discount_code: DiscountCode) -> None:
        """
        Count a redemption inside the caller's transaction.
        The caller commits or rolls back together with the subscription write.
        """
        if not self.repo.increment_usage(self.db, discount_code.id):
            raise ValidationError("Invalid discount code: redemption limit reached")

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def list_codes(self, code: Optional[str] = None, is_active: Optional[bool] = None):
        return self.repo.get_codes(self.db, code, is_active)

    def get_code(self, code_id: int) -> DiscountCode:
        discount_code = self.repo.get_code_by_id(self.db, code_id)
        if not discount_code:
            raise NotFoundError("Discount code not found")
        return discount_code

    def create_code(self, data: DiscountCodeCreate) -> DiscountCode:
        code = normalize_code(require_text(data.code, "Discount code"))
        kind = (data.kind or "").strip().upper()
        validate_rule(kind, data.value)
        self._validate_window(data.starts_at, data.ends_at)

        if self.repo.get_code(self.db, code):
            raise ConflictError("Discount code already exists")

        try:
            discount_code = self.repo.create_code(
                self.db,
                code=code,
                description=data.description,
                kind=kind,
                value=to_money(data.value),
                is_active=data.is_active,
                starts_at=data.starts_at,
                ends_at=data.ends_at,
                max_redemptions=data.max_redemptions,
            )
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Discount code already exists")

        logger.info(f"✅ Created discount code {discount_code.code} ({kind} {discount_code.value})")
        return discount_code

    def update_code(self, code_id: int, data: DiscountCodeUpdate) -> DiscountCode:
        discount_code = self.get_code(code_id)
        fields = data.model_dump(exclude_unset=True)

        updates = {}
        if "code" in fields:
            code = normalize_code(require_text(data.code, "Discount code"))
            if self.repo.get_code(self.db, code, exclude_id=discount_code.id):
                raise ConflictError("Discount code already exists")
            updates["code"] = code
        if "kind" in fields or "value" in fields:
            kind = (data.kind or discount_code.kind).strip().upper()
            value = data.value if data.value is not None else discount_code.value
            validate_rule(kind, value)
            updates["kind"] = kind
            updates["value"] = to_money(value)
        for key in ("description", "is_active", "starts_at", "ends_at", "max_redemptions"):
            if key in fields:
                updates[key] = fields[key]

        self._validate_window(
            updates.get("starts_at", discount_code.starts_at),
            updates.get("ends_at", discount_code.ends_at),
        )

        discount_code = self.repo.update_code(self.db, discount_code, **updates)
        logger.info(f"✅ Updated discount code {discount_code.code}: {sorted(updates)}")
        return discount_code

    def delete_code(self, code_id: int) -> dict:
        discount_code = self.get_code(code_id)
        if self.repo.count_redemptions(self.db, discount_code.id):
            raise ConflictError("Discount code has been redeemed; deactivate it instead")

        self.repo.delete_code(self.db, discount_code)
        logger.info(f"🗑️ Deleted discount code {discount_code.code}")
        return {"message": "Discount code deleted"}

    def get_usage(self) -> list[dict]:
        """Redemptions and total discount granted per code"""
        totals = self.repo.get_discount_totals(self.db)
        return [
            {
                "id": c.id,
                "code": c.code,
                "used_count": c.used_count,
                "total_discount": totals.get(c.id, 0.0),
            }
            for c in self.repo.get_codes(self.db)
        ]

    @staticmethod
    def _validate_window(starts_at: Optional[datetime], ends_at: Optional[datetime]) -> None:
        if starts_at and ends_at and ends_at <= starts_at:
            raise ValidationError("Discount code must end after it starts")
