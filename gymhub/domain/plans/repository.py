"""Plan repository - Database operations for the membership plan catalog"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import MembershipPlan, Subscription, SubscriptionStatus


class PlanRepository:
    """Repository for membership plan database operations"""

    @staticmethod
    def get_plans(
        db: Session, include_archived: bool = False, name: Optional[str] = None
    ) -> list[MembershipPlan]:
        """Get plans, cheapest first, optionally matching part of the name (case-insensitive)"""
        query = db.query(MembershipPlan)
        if not include_archived:
            query = query.filter(MembershipPlan.archived.is_(False))
        if name:
            search_term = f"%{name.lower()}%"
            query = query.filter(MembershipPlan.name.ilike(search_term))
        return query.order_by(MembershipPlan.price.asc(), MembershipPlan.name.asc()).all()

    @staticmethod
    def get_plan_by_id(db: Session, plan_id: int) -> Optional[MembershipPlan]:
        """Get a specific plan by ID, archived or not"""
        return db.query(MembershipPlan).filter(MembershipPlan.id == plan_id).first()

    @staticmethod
    def get_plan_by_name(
        db: Session, name: str, exclude_id: Optional[int] = None
    ) -> Optional[MembershipPlan]:
        """Case-insensitive lookup used for the duplicate-name check"""
        query = db.query(MembershipPlan).filter(func.lower(MembershipPlan.name) == name.lower())
        if exclude_id is not None:
            query = query.filter(MembershipPlan.id != exclude_id)
        return query.first()

    @staticmethod
    def create_plan(db: Session, **plan_data) -> MembershipPlan:
        """Create a new plan"""
        plan = MembershipPlan(**plan_data)
        db.add(plan)
        db.commit()
        db.refresh(plan)
        return plan

    @staticmethod
    def update_plan(db: Session, plan: MembershipPlan, **updates) -> MembershipPlan:
        """Update a plan with provided fields"""
        for key, value in updates.items():
            if hasattr(plan, key):
                setattr(plan, key, value)

        db.commit()
        db.refresh(plan)
        return plan

    @staticmethod
    def count_current_subscriptions(db: Session, plan_id: int) -> int:
        """Count ACTIVE/FROZEN subscriptions still on a plan"""
        return (
            db.query(Subscription)
            .filter(
                Subscription.plan_id == plan_id,
                Subscription.status.in_(SubscriptionStatus.CURRENT),
            )
            .count()
        )
