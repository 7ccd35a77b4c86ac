"""Class router - FastAPI endpoints for classes and bookings"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import BookingRequest, BookingResponse, GymClassCreate, GymClassResponse
from .service import ClassService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/classes", tags=["Classes"])


def get_class_service(db: Session = Depends(get_db)) -> ClassService:
    """Dependency injection for ClassService"""
    return ClassService(db)


@router.get("", response_model=list[GymClassResponse])
async def list_classes(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    include_inactive: bool = Query(False),
    service: ClassService = Depends(get_class_service),
):
    """Scheduled classes with remaining spots"""
    return service.list_classes(start_date, end_date, include_inactive)


@router.post("", response_model=GymClassResponse, status_code=201)
async def create_class(
    body: GymClassCreate,
    service: ClassService = Depends(get_class_service),
):
    return service.create_class(body)


@router.post("/{class_id}/bookings", response_model=BookingResponse, status_code=201)
async def book_class(
    class_id: int,
    body: BookingRequest,
    service: ClassService = Depends(get_class_service),
):
    """Book a member into a class"""
    return service.book_class(class_id, body.member_id)


@router.post("/bookings/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: int,
    service: ClassService = Depends(get_class_service),
):
    return service.cancel_booking(booking_id)
