"""Member router - FastAPI endpoints for member records"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import EntitlementResponse, MemberCreate, MemberResponse
from .service import MemberService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/members", tags=["Members"])


def get_member_service(db: Session = Depends(get_db)) -> MemberService:
    """Dependency injection for MemberService"""
    return MemberService(db)


@router.post("", response_model=MemberResponse, status_code=201)
async def create_member(
    body: MemberCreate,
    service: MemberService = Depends(get_member_service),
):
    """Register a member"""
    return service.create_member(body)


@router.get("/{member_id}", response_model=MemberResponse)
async def get_member(
    member_id: int,
    service: MemberService = Depends(get_member_service),
):
    """Get a member"""
    return service.get_member(member_id)


@router.get("/{member_id}/memberships")
async def get_member_memberships(member_id: int, db: Session = Depends(get_db)):
    """Subscription history for a member, newest first"""
    from ..memberships.schemas import SubscriptionResponse
    from ..memberships.service import MembershipService

    subscriptions = MembershipService(db).list_member_subscriptions(member_id)
    return [SubscriptionResponse.from_subscription(s) for s in subscriptions]


@router.get("/{member_id}/entitlement", response_model=EntitlementResponse)
async def get_member_entitlement(
    member_id: int,
    as_of: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    """Whether the member may check in on the given day"""
    from ..attendance.service import AttendanceService

    return AttendanceService(db).entitlement_status(member_id, as_of)
