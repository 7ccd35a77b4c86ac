"""Membership router - FastAPI endpoints for the subscription lifecycle"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ..discounts.schemas import PricePreviewResponse
from .schemas import (
    ChangePlanRequest,
    ExpireLapsedRequest,
    ExpireLapsedResponse,
    RenewRequest,
    SubscribeRequest,
    SubscriptionResponse,
)
from .service import MembershipService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/memberships", tags=["Memberships"])


def get_membership_service(
    background_tasks: BackgroundTasks, db: Session = Depends(get_db)
) -> MembershipService:
    """Dependency injection for MembershipService; notifications go out after the response"""
    return MembershipService(db, background_tasks=background_tasks)


# ============================================================================
# ASSIGNMENT
# ============================================================================


@router.post("/subscribe", response_model=SubscriptionResponse, status_code=201)
async def subscribe(
    body: SubscribeRequest,
    service: MembershipService = Depends(get_membership_service),
):
    """Assign a plan to a member with no current membership"""
    subscription = service.assign(body.member_id, body.plan_id, body.start_date, body.discount_code)
    return SubscriptionResponse.from_subscription(subscription)


@router.get("/discount-preview", response_model=PricePreviewResponse)
async def discount_preview(
    plan_id: int = Query(...),
    code: Optional[str] = Query(None),
    service: MembershipService = Depends(get_membership_service),
):
    """Preview a plan's price with a discount code"""
    return service.preview_discount(plan_id, code)


@router.post("/expire-lapsed", response_model=ExpireLapsedResponse)
async def expire_lapsed(
    body: Optional[ExpireLapsedRequest] = None,
    service: MembershipService = Depends(get_membership_service),
):
    """Expire memberships whose end date has passed"""
    return {"expired_count": service.expire_lapsed(body.as_of if body else None)}


# ============================================================================
# LIFECYCLE
# ============================================================================


@router.get("/{subscription_id}", response_model=SubscriptionResponse)
async def get_membership(
    subscription_id: int,
    service: MembershipService = Depends(get_membership_service),
):
    """Get a membership"""
    return SubscriptionResponse.from_subscription(service.get_subscription(subscription_id))


@router.post("/{subscription_id}/renew", response_model=SubscriptionResponse, status_code=201)
async def renew_membership(
    subscription_id: int,
    body: RenewRequest,
    service: MembershipService = Depends(get_membership_service),
):
    """Renew an expired or cancelled membership"""
    subscription = service.renew(subscription_id, body.plan_id, body.discount_code)
    return SubscriptionResponse.from_subscription(subscription)


@router.patch("/{subscription_id}/change-plan", response_model=SubscriptionResponse)
async def change_membership_plan(
    subscription_id: int,
    body: ChangePlanRequest,
    service: MembershipService = Depends(get_membership_service),
):
    """Switch the plan of a current membership"""
    return SubscriptionResponse.from_subscription(service.change_plan(subscription_id, body.plan_id))


@router.post("/{subscription_id}/freeze", response_model=SubscriptionResponse)
async def freeze_membership(
    subscription_id: int,
    service: MembershipService = Depends(get_membership_service),
):
    """Freeze an active membership"""
    return SubscriptionResponse.from_subscription(service.freeze(subscription_id))


@router.post("/{subscription_id}/unfreeze", response_model=SubscriptionResponse)
async def unfreeze_membership(
    subscription_id: int,
    service: MembershipService = Depends(get_membership_service),
):
    """Unfreeze a frozen membership"""
    return SubscriptionResponse.from_subscription(service.unfreeze(subscription_id))


@router.post("/{subscription_id}/expire", response_model=SubscriptionResponse)
async def expire_membership(
    subscription_id: int,
    service: MembershipService = Depends(get_membership_service),
):
    """Expire a membership now, regardless of its end date"""
    return SubscriptionResponse.from_subscription(service.mark_expired(subscription_id))


@router.post("/{subscription_id}/cancel", response_model=SubscriptionResponse)
async def cancel_membership(
    subscription_id: int,
    service: MembershipService = Depends(get_membership_service),
):
    """Cancel a current membership"""
    return SubscriptionResponse.from_subscription(service.cancel(subscription_id))
