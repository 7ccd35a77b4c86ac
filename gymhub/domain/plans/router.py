"""Plan router - FastAPI endpoints for the membership plan catalog"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.schemas import MessageResponse
from .schemas import PlanCreate, PlanResponse, PlanUpdate
from .service import PlanService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/memberships/plans", tags=["Membership Plans"])


def get_plan_service(db: Session = Depends(get_db)) -> PlanService:
    """Dependency injection for PlanService"""
    return PlanService(db)


@router.get("", response_model=list[PlanResponse])
async def list_plans(
    include_archived: bool = Query(False),
    name: Optional[str] = Query(None, description="Case-insensitive match on part of the plan name"),
    service: PlanService = Depends(get_plan_service),
):
    """List membership plans, lowest price first"""
    return service.list_plans(include_archived, name)


@router.post("", response_model=PlanResponse, status_code=201)
async def create_plan(
    body: PlanCreate,
    service: PlanService = Depends(get_plan_service),
):
    """Create a membership plan"""
    return service.create_plan(body)


@router.get("/{plan_id}", response_model=PlanResponse)
async def get_plan(
    plan_id: int,
    service: PlanService = Depends(get_plan_service),
):
    """Get a membership plan"""
    return service.get_plan(plan_id)


@router.patch("/{plan_id}", response_model=PlanResponse)
async def update_plan(
    plan_id: int,
    body: PlanUpdate,
    service: PlanService = Depends(get_plan_service),
):
    """Partially update a membership plan"""
    return service.update_plan(plan_id, body)


@router.delete("/{plan_id}", response_model=MessageResponse)
async def delete_plan(
    plan_id: int,
    service: PlanService = Depends(get_plan_service),
):
    """Archive a membership plan"""
    return service.delete_plan(plan_id)
