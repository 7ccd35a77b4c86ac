"""Membership repository - Database operations for member subscriptions"""

from datetime import date
from typing import Optional

from sqlalchemy import update
from sqlalchemy.orm import Session, joinedload

from ...models import Subscription, SubscriptionStatus


class MembershipRepository:
    """Repository for subscription database operations"""

    @staticmethod
    def get_subscription_by_id(db: Session, subscription_id: int) -> Optional[Subscription]:
        """Get a specific subscription by ID"""
        return (
            db.query(Subscription)
            .options(joinedload(Subscription.plan), joinedload(Subscription.discount_code))
            .filter(Subscription.id == subscription_id)
            .first()
        )

    @staticmethod
    def get_current_subscription(db: Session, member_id: int) -> Optional[Subscription]:
        """The member's ACTIVE or FROZEN subscription, computed by query every time"""
        return (
            db.query(Subscription)
            .filter(
                Subscription.member_id == member_id,
                Subscription.status.in_(SubscriptionStatus.CURRENT),
            )
            .first()
        )

    @staticmethod
    def get_member_subscriptions(db: Session, member_id: int) -> list[Subscription]:
        """Full subscription history for a member, newest first"""
        return (
            db.query(Subscription)
            .options(joinedload(Subscription.plan), joinedload(Subscription.discount_code))
            .filter(Subscription.member_id == member_id)
            .order_by(Subscription.start_date.desc(), Subscription.id.desc())
            .all()
        )

    @staticmethod
    def get_successor(db: Session, subscription_id: int) -> Optional[Subscription]:
        """The subscription that renewed the given one, if any"""
        return (
            db.query(Subscription)
            .filter(Subscription.previous_subscription_id == subscription_id)
            .first()
        )

    @staticmethod
    def create_subscription(db: Session, **subscription_data) -> Subscription:
        """
        Insert a subscription and commit.
        The partial unique index on member_id rejects a second current
        subscription with an IntegrityError.
        """
        subscription = Subscription(**subscription_data)
        db.add(subscription)
        db.commit()
        db.refresh(subscription)
        return subscription

    @staticmethod
    def compare_and_set(
        db: Session,
        subscription_id: int,
        expected_status: str,
        expected_version: int,
        **values,
    ) -> bool:
        """
        Conditional write: UPDATE ... WHERE id = ? AND status = ? AND version = ?
        Returns False when another request changed the row first.
        """
        values["version"] = expected_version + 1
        updated = (
            db.query(Subscription)
            .filter(
                Subscription.id == subscription_id,
                Subscription.status == expected_status,
                Subscription.version == expected_version,
            )
            .update(
                {getattr(Subscription, key): value for key, value in values.items()},
                synchronize_session=False,
            )
        )
        db.commit()
        return updated == 1

    @staticmethod
    def expire_lapsed_subscriptions(db: Session, as_of: date) -> list[tuple[int, int]]:
        """
        Mark current subscriptions whose end date has passed EXPIRED.
        Returns (id, member_id) for exactly the rows this statement changed.
        """
        result = db.execute(
            update(Subscription)
            .where(
                Subscription.status.in_(SubscriptionStatus.CURRENT),
                Subscription.end_date < as_of,
            )
            .values(
                status=SubscriptionStatus.EXPIRED,
                version=Subscription.version + 1,
            )
            .returning(Subscription.id, Subscription.member_id)
            .execution_options(synchronize_session=False)
        )
        expired = [(row.id, row.member_id) for row in result]
        db.commit()
        return expired
