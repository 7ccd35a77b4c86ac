"""
Membership service - Subscription lifecycle for gym members

States: ACTIVE <-> FROZEN, ACTIVE/FROZEN -> EXPIRED | CANCELLED.
EXPIRED and CANCELLED records are history; a member gets access back only
through renew(), which creates a new record chained to the old one.

Every state change is a single conditional UPDATE guarded by the status and
version the caller observed, so two concurrent admin actions on the same
subscription cannot both succeed.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import BackgroundTasks
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...config import NOTIFY_MEMBERSHIP_EVENTS
from ...models import MembershipPlan, Subscription, SubscriptionStatus
from ...services.notification_service import (
    MembershipEvent,
    NotificationService,
    get_notification_service,
)
from ...shared.errors import ConflictError, NotFoundError, ValidationError
from ..discounts.pricing import PriceBreakdown, breakdown
from ..discounts.service import DiscountCodeService
from ..members.service import MemberService
from ..plans.service import PlanService, resolve_duration_days
from .repository import MembershipRepository

logger = logging.getLogger(__name__)


class MembershipService:
    """Service layer for the subscription lifecycle"""

    def __init__(
        self,
        db: Session,
        notifier: Optional[NotificationService] = None,
        background_tasks: Optional[BackgroundTasks] = None,
    ):
        self.db = db
        self.repo = MembershipRepository()
        self.members = MemberService(db)
        self.plans = PlanService(db)
        self.discounts = DiscountCodeService(db)
        self.notifier = notifier or get_notification_service()
        # Set by request handlers: delivery then runs after the response is sent
        self.background_tasks = background_tasks

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_subscription(self, subscription_id: int) -> Subscription:
        subscription = self.repo.get_subscription_by_id(self.db, subscription_id)
        if not subscription:
            raise NotFoundError(f"Membership with ID {subscription_id} not found")
        return subscription

    def get_current_subscription(self, member_id: int) -> Optional[Subscription]:
        """The member's single ACTIVE or FROZEN subscription, if any"""
        return self.repo.get_current_subscription(self.db, member_id)

    def list_member_subscriptions(self, member_id: int) -> list[Subscription]:
        self.members.get_member(member_id)
        return self.repo.get_member_subscriptions(self.db, member_id)

    def preview_discount(self, plan_id: int, code: Optional[str] = None) -> dict:
        """Price a plan with a code without redeeming it"""
        plan = self.plans.get_assignable_plan(plan_id)
        pricing, discount_code = self.discounts.price(plan.price, code)
        return {
            "plan_id": plan.id,
            "original_price": pricing.original_price,
            "discount_amount": pricing.discount_amount,
            "final_price": pricing.final_price,
            "discount_code": discount_code.code if discount_code else None,
        }

    # ------------------------------------------------------------------
    # Creation: assign / renew
    # ------------------------------------------------------------------

    def assign(
        self,
        member_id: int,
        plan_id: int,
        start_date: Optional[date] = None,
        discount_code: Optional[str] = None,
    ) -> Subscription:
        """Give a member with no current subscription a new ACTIVE one"""
        member = self.members.get_member(member_id)
        plan = self.plans.get_assignable_plan(plan_id)

        if self.repo.get_current_subscription(self.db, member.id):
            logger.warning(f"⚠️ Member {member.id} already has a current membership")
            raise ConflictError(
                "Member already has an active membership. Use change-plan to switch plans."
            )

        subscription = self._create_subscription(
            member_id=member.id,
            plan=plan,
            start_date=start_date or datetime.utcnow().date(),
            discount_code=discount_code,
            conflict_message="Member already has an active membership",
        )

        logger.info(
            f"✅ Assigned plan {plan.id} to member {member.id}: subscription {subscription.id} "
            f"({subscription.start_date} → {subscription.end_date}, {subscription.final_price})"
        )
        self._emit("membership.assigned", subscription)
        return subscription

    def renew(
        self,
        subscription_id: int,
        plan_id: Optional[int] = None,
        discount_code: Optional[str] = None,
    ) -> Subscription:
        """
        Start a new subscription after an EXPIRED or CANCELLED one.
        The old record is left untouched as history.
        """
        previous = self.get_subscription(subscription_id)

        if previous.status not in SubscriptionStatus.TERMINAL:
            logger.warning(
                f"⚠️ Renew rejected for subscription {previous.id}: still {previous.status}"
            )
            raise ConflictError(
                f"Membership is still {previous.status}; it must expire or be cancelled before renewal"
            )
        if self.repo.get_successor(self.db, previous.id):
            raise ConflictError("Membership has already been renewed")
        if self.repo.get_current_subscription(self.db, previous.member_id):
            raise ConflictError("Member already has an active membership")

        plan = self.plans.get_assignable_plan(plan_id or previous.plan_id)

        subscription = self._create_subscription(
            member_id=previous.member_id,
            plan=plan,
            start_date=datetime.utcnow().date(),
            discount_code=discount_code,
            previous_subscription_id=previous.id,
            conflict_message="Membership has already been renewed or the member already has an active membership",
        )

        logger.info(
            f"🔁 Renewed subscription {previous.id} as {subscription.id} "
            f"for member {subscription.member_id} on plan {plan.id}"
        )
        self._emit("membership.renewed", subscription, previous_subscription_id=previous.id)
        return subscription

    def _create_subscription(
        self,
        member_id: int,
        plan: MembershipPlan,
        start_date: date,
        discount_code: Optional[str],
        conflict_message: str,
        previous_subscription_id: Optional[int] = None,
    ) -> Subscription:
        duration_days = resolve_duration_days(plan)
        pricing, code = self.discounts.price(plan.price, discount_code)

        try:
            if code is not None:
                self.discounts.redeem(code)
            subscription = self.repo.create_subscription(
                self.db,
                member_id=member_id,
                plan_id=plan.id,
                status=SubscriptionStatus.ACTIVE,
                start_date=start_date,
                end_date=start_date + timedelta(days=duration_days),
                duration_days=duration_days,
                original_price=pricing.original_price,
                discount_amount=pricing.discount_amount,
                final_price=pricing.final_price,
                discount_code_id=code.id if code else None,
                discount_kind=code.kind if code else None,
                discount_value=code.value if code else None,
                previous_subscription_id=previous_subscription_id,
            )
        except IntegrityError:
            # Lost a race against another request for the same member
            self.db.rollback()
            logger.warning(f"⚠️ Concurrent membership write for member {member_id} rejected")
            raise ConflictError(conflict_message)
        except ValidationError:
            self.db.rollback()
            raise

        return self.get_subscription(subscription.id)

    # ------------------------------------------------------------------
    # Changes to the current subscription
    # ------------------------------------------------------------------

    def change_plan(self, subscription_id: int, new_plan_id: int) -> Subscription:
        """
        Move a current subscription to another plan. Dates stay the same;
        prices are recomputed from the new plan. A percentage discount is
        re-applied to the new price, a fixed discount is carried forward
        clamped to the new price.
        """
        subscription = self.get_subscription(subscription_id)
        if subscription.status not in SubscriptionStatus.CURRENT:
            raise ConflictError(f"Cannot change the plan of a {subscription.status} membership")

        plan = self.plans.get_assignable_plan(new_plan_id)
        if plan.id == subscription.plan_id:
            raise ValidationError("Membership is already on this plan")

        pricing = self._reprice(subscription, plan)
        changed = self.repo.compare_and_set(
            self.db,
            subscription.id,
            expected_status=subscription.status,
            expected_version=subscription.version,
            plan_id=plan.id,
            original_price=pricing.original_price,
            discount_amount=pricing.discount_amount,
            final_price=pricing.final_price,
        )
        if not changed:
            raise ConflictError("Membership was modified by another request; reload and retry")

        subscription = self.get_subscription(subscription.id)
        logger.info(
            f"🔀 Subscription {subscription.id} moved to plan {plan.id} "
            f"(final price {subscription.final_price})"
        )
        self._emit("membership.plan_changed", subscription, plan_id=plan.id)
        return subscription

    @staticmethod
    def _reprice(subscription: Subscription, plan: MembershipPlan) -> PriceBreakdown:
        if subscription.discount_kind:
            return breakdown(plan.price, subscription.discount_kind, subscription.discount_value)
        return breakdown(plan.price)

    def freeze(self, subscription_id: int) -> Subscription:
        """ACTIVE -> FROZEN; freezing twice is an error, not a no-op"""
        return self._transition(
            subscription_id,
            allowed_from=(SubscriptionStatus.ACTIVE,),
            to_status=SubscriptionStatus.FROZEN,
            event_type="membership.frozen",
            frozen_at=datetime.utcnow(),
        )

    def unfreeze(self, subscription_id: int) -> Subscription:
        """FROZEN -> ACTIVE; dates and prices are left as they were"""
        return self._transition(
            subscription_id,
            allowed_from=(SubscriptionStatus.FROZEN,),
            to_status=SubscriptionStatus.ACTIVE,
            event_type="membership.unfrozen",
            frozen_at=None,
        )

    def mark_expired(self, subscription_id: int) -> Subscription:
        """Administrative override: expire regardless of end date"""
        return self._transition(
            subscription_id,
            allowed_from=SubscriptionStatus.CURRENT,
            to_status=SubscriptionStatus.EXPIRED,
            event_type="membership.expired",
        )

    def cancel(self, subscription_id: int) -> Subscription:
        return self._transition(
            subscription_id,
            allowed_from=SubscriptionStatus.CURRENT,
            to_status=SubscriptionStatus.CANCELLED,
            event_type="membership.cancelled",
            cancelled_at=datetime.utcnow(),
        )

    def _transition(
        self,
        subscription_id: int,
        allowed_from: tuple,
        to_status: str,
        event_type: str,
        **values,
    ) -> Subscription:
        subscription = self.get_subscription(subscription_id)

        if subscription.status not in allowed_from:
            if subscription.status == to_status:
                message = f"Membership is already {to_status}"
            else:
                message = f"Cannot move a {subscription.status} membership to {to_status}"
            logger.warning(f"⚠️ Subscription {subscription.id}: {message}")
            raise ConflictError(message)

        changed = self.repo.compare_and_set(
            self.db,
            subscription.id,
            expected_status=subscription.status,
            expected_version=subscription.version,
            status=to_status,
            **values,
        )
        if not changed:
            logger.warning(f"⚠️ Subscription {subscription.id} changed concurrently; {to_status} rejected")
            raise ConflictError("Membership was modified by another request; reload and retry")

        subscription = self.get_subscription(subscription.id)
        logger.info(f"✅ Subscription {subscription.id} is now {to_status}")
        self._emit(event_type, subscription)
        return subscription

    # ------------------------------------------------------------------
    # Time-driven expiry
    # ------------------------------------------------------------------

    def expire_lapsed(self, as_of: Optional[date] = None) -> int:
        """Expire every current subscription whose end date is before as_of"""
        as_of = as_of or datetime.utcnow().date()
        expired = self.repo.expire_lapsed_subscriptions(self.db, as_of)

        logger.info(f"⏰ Membership expiry sweep as of {as_of}: expired {len(expired)} membership(s)")
        for subscription_id, member_id in expired:
            self._notify(
                MembershipEvent(
                    type="membership.expired",
                    member_id=member_id,
                    subscription_id=subscription_id,
                    payload={"reason": "end_date_passed"},
                )
            )
        return len(expired)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    def _emit(self, event_type: str, subscription: Subscription, **payload) -> None:
        payload.setdefault("status", subscription.status)
        self._notify(
            MembershipEvent(
                type=event_type,
                member_id=subscription.member_id,
                subscription_id=subscription.id,
                payload=payload,
            )
        )

    def _notify(self, event: MembershipEvent) -> None:
        if not NOTIFY_MEMBERSHIP_EVENTS:
            return
        if self.background_tasks is not None:
            self.background_tasks.add_task(self.notifier.notify, event)
            return
        try:
            self.notifier.notify_sync(event)
        except Exception as e:
            # The transition is already committed; delivery is best-effort
            logger.error(f"❌ Notification for {event.type} failed: {e}")
