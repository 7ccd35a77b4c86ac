"""Discount repository - Database operations for discount codes"""

from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import DiscountCode, Subscription


class DiscountRepository:
    """Repository for discount code database operations"""

    @staticmethod
    def get_codes(
        db: Session, code: Optional[str] = None, is_active: Optional[bool] = None
    ) -> list[DiscountCode]:
        """List discount codes, newest first"""
        query = db.query(DiscountCode)
        if code:
            query = query.filter(DiscountCode.code.contains(code.upper()))
        if is_active is not None:
            query = query.filter(DiscountCode.is_active.is_(is_active))
        return query.order_by(DiscountCode.created_at.desc(), DiscountCode.id.desc()).all()

    @staticmethod
    def get_code_by_id(db: Session, code_id: int) -> Optional[DiscountCode]:
        return db.query(DiscountCode).filter(DiscountCode.id == code_id).first()

    @staticmethod
    def get_code(db: Session, code: str, exclude_id: Optional[int] = None) -> Optional[DiscountCode]:
        """Get a discount code by its (normalized) code string"""
        query = db.query(DiscountCode).filter(DiscountCode.code == code)
        if exclude_id is not None:
            query = query.filter(DiscountCode.id != exclude_id)
        return query.first()

    @staticmethod
    def create_code(db: Session, **code_data) -> DiscountCode:
        discount_code = DiscountCode(**code_data)
        db.add(discount_code)
        db.commit()
        db.refresh(discount_code)
        return discount_code

    @staticmethod
    def update_code(db: Session, discount_code: DiscountCode, **updates) -> DiscountCode:
        for key, value in updates.items():
            if hasattr(discount_code, key):
                setattr(discount_code, key, value)

        db.commit()
        db.refresh(discount_code)
        return discount_code

    @staticmethod
    def delete_code(db: Session, discount_code: DiscountCode) -> None:
        db.delete(discount_code)
        db.commit()

    @staticmethod
    def count_redemptions(db: Session, code_id: int) -> int:
        """Count subscriptions that used a code"""
        return db.query(Subscription).filter(Subscription.discount_code_id == code_id).count()

    @staticmethod
    def increment_usage(db: Session, code_id: int) -> bool:
        """
        Count one redemption, guarded by the redemption limit.
        Not committed - runs inside the caller's transaction.
        Returns False when the limit was reached concurrently.
        """
        updated = (
            db.query(DiscountCode)
            .filter(
                DiscountCode.id == code_id,
                or_(
                    DiscountCode.max_redemptions.is_(None),
                    DiscountCode.used_count < DiscountCode.max_redemptions,
                ),
            )
            .update(
                {DiscountCode.used_count: DiscountCode.used_count + 1},
                synchronize_session=False,
            )
        )
        return updated == 1

    @staticmethod
    def get_discount_totals(db: Session) -> dict[int, float]:
        """Total discount granted per code across all subscriptions"""
        rows = (
            db.query(Subscription.discount_code_id, func.sum(Subscription.discount_amount))
            .filter(Subscription.discount_code_id.isnot(None))
            .group_by(Subscription.discount_code_id)
            .all()
        )
        return {code_id: float(total or 0) for code_id, total in rows}
