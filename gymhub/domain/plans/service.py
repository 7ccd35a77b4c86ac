"""Plan service - Business logic for the membership plan catalog"""

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...config import MONTHLY_DURATION_DAYS, YEARLY_DURATION_DAYS
from ...models import DurationKind, MembershipPlan
from ...shared.errors import ConflictError, NotFoundError, ValidationError
from ...shared.validators import require_text
from .repository import PlanRepository
from .schemas import PlanCreate, PlanUpdate

logger = logging.getLogger(__name__)


def resolve_duration_days(plan: MembershipPlan) -> int:
    """Turn a plan's duration variant into a concrete day count"""
    if plan.duration_kind == DurationKind.MONTHLY:
        return MONTHLY_DURATION_DAYS
    if plan.duration_kind == DurationKind.YEARLY:
        return YEARLY_DURATION_DAYS
    if plan.duration_kind == DurationKind.FIXED_DAYS and plan.duration_days:
        return plan.duration_days
    raise ValidationError(f"Membership plan {plan.id} has an invalid duration")


def _validate_price(price: Decimal) -> Decimal:
    if price is None or price < 0:
        raise ValidationError("Price must be zero or greater")
    return Decimal(price).quantize(Decimal("0.01"))


def _validate_duration(kind: Optional[str], days: Optional[int]) -> tuple[str, Optional[int]]:
    kind = (kind or "").strip().upper()
    if kind not in DurationKind.ALL:
        raise ValidationError("Duration must be one of MONTHLY, YEARLY or FIXED_DAYS")
    if kind == DurationKind.FIXED_DAYS:
        if days is None or days <= 0:
            raise ValidationError("duration_days must be a positive number of days")
        return kind, days
    return kind, None


def _validate_features(features: Optional[list[str]]) -> list[str]:
    cleaned = [f.strip() for f in (features or []) if f and f.strip()]
    if not cleaned:
        raise ValidationError("A plan needs at least one feature")
    return cleaned


class PlanService:
    """Service layer for plan catalog business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PlanRepository()

    def list_plans(self, include_archived: bool = False, name: Optional[str] = None) -> list[MembershipPlan]:
        """List plans, lowest price first"""
        name = name.strip() if name else None
        return self.repo.get_plans(self.db, include_archived, name)

    def get_plan(self, plan_id: int, allow_archived: bool = True) -> MembershipPlan:
        """Get a specific plan"""
        plan = self.repo.get_plan_by_id(self.db, plan_id)
        if not plan or (plan.archived and not allow_archived):
            raise NotFoundError(f"Membership plan with ID {plan_id} not found")
        return plan

    def get_assignable_plan(self, plan_id: int) -> MembershipPlan:
        """Get a plan that new subscriptions may reference"""
        plan = self.get_plan(plan_id)
        if plan.archived:
            raise ValidationError("Membership plan is archived")
        return plan

    def create_plan(self, data: PlanCreate) -> MembershipPlan:
        """Create a plan after validating every field"""
        name = require_text(data.name, "Plan name")
        price = _validate_price(data.price)
        duration_kind, duration_days = _validate_duration(data.duration, data.duration_days)
        features = _validate_features(data.features)

        if self.repo.get_plan_by_name(self.db, name):
            raise ConflictError(f'Membership plan "{name}" already exists')

        try:
            plan = self.repo.create_plan(
                self.db,
                name=name,
                description=data.description,
                price=price,
                duration_kind=duration_kind,
                duration_days=duration_days,
                features=features,
            )
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(f'Membership plan "{name}" already exists')

        logger.info(f"✅ Created membership plan {plan.id} ({plan.name}, {plan.price})")
        return plan

    def update_plan(self, plan_id: int, data: PlanUpdate) -> MembershipPlan:
        """Partially update a plan; only touched fields are validated"""
        plan = self.get_plan(plan_id, allow_archived=False)
        fields = data.model_dump(exclude_unset=True)

        updates = {}
        if "name" in fields:
            name = require_text(data.name, "Plan name")
            if self.repo.get_plan_by_name(self.db, name, exclude_id=plan.id):
                raise ConflictError(f'Membership plan "{name}" already exists')
            updates["name"] = name
        if "description" in fields:
            updates["description"] = data.description
        if "price" in fields:
            updates["price"] = _validate_price(data.price)
        if "duration" in fields or "duration_days" in fields:
            kind = data.duration if "duration" in fields else plan.duration_kind
            days = data.duration_days if "duration_days" in fields else plan.duration_days
            updates["duration_kind"], updates["duration_days"] = _validate_duration(kind, days)
        if "features" in fields:
            updates["features"] = _validate_features(data.features)

        if not updates:
            return plan

        try:
            plan = self.repo.update_plan(self.db, plan, **updates)
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Membership plan name already exists")

        # Subscriptions keep their own price/duration snapshot
        logger.info(f"✅ Updated membership plan {plan.id}: {sorted(updates)}")
        return plan

    def delete_plan(self, plan_id: int) -> dict:
        """Archive a plan; historical subscriptions keep referencing it"""
        plan = self.get_plan(plan_id, allow_archived=False)

        current = self.repo.count_current_subscriptions(self.db, plan.id)
        self.repo.update_plan(self.db, plan, archived=True)

        logger.info(
            f"🗄️ Archived membership plan {plan.id} ({plan.name}); "
            f"{current} current subscription(s) keep their snapshot"
        )
        return {"message": f'Plan "{plan.name}" archived'}
