"""Discount router - FastAPI endpoints for discount code administration"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ...shared.schemas import MessageResponse
from .schemas import (
    DiscountCodeCreate,
    DiscountCodeResponse,
    DiscountCodeUpdate,
    DiscountUsageItem,
)
from .service import DiscountCodeService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/discount-codes", tags=["Discount Codes"])


def get_discount_service(db: Session = Depends(get_db)) -> DiscountCodeService:
    """Dependency injection for DiscountCodeService"""
    return DiscountCodeService(db)


@router.get("", response_model=list[DiscountCodeResponse])
async def list_discount_codes(
    code: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    service: DiscountCodeService = Depends(get_discount_service),
):
    """List discount codes"""
    return service.list_codes(code, is_active)


@router.post("", response_model=DiscountCodeResponse, status_code=201)
async def create_discount_code(
    body: DiscountCodeCreate,
    service: DiscountCodeService = Depends(get_discount_service),
):
    """Create a discount code"""
    return service.create_code(body)


@router.get("/usage", response_model=list[DiscountUsageItem])
async def get_discount_usage(service: DiscountCodeService = Depends(get_discount_service)):
    """Redemption counts and total discount per code"""
    return service.get_usage()


@router.patch("/{code_id}", response_model=DiscountCodeResponse)
async def update_discount_code(
    code_id: int,
    body: DiscountCodeUpdate,
    service: DiscountCodeService = Depends(get_discount_service),
):
    """Update a discount code"""
    return service.update_code(code_id, body)


@router.delete("/{code_id}", response_model=MessageResponse)
async def delete_discount_code(
    code_id: int,
    service: DiscountCodeService = Depends(get_discount_service),
):
    """Delete a discount code that was never redeemed"""
    return service.delete_code(code_id)
