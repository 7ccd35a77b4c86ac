"""Report router - FastAPI endpoints for dashboard reports"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import MembershipSummary, OccupancyReport, RevenueReport
from .service import ReportService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])


def get_report_service(db: Session = Depends(get_db)) -> ReportService:
    """Dependency injection for ReportService"""
    return ReportService(db)


@router.get("/revenue", response_model=RevenueReport)
async def revenue_report(
    start_date: date = Query(...),
    end_date: date = Query(...),
    service: ReportService = Depends(get_report_service),
):
    """Subscription revenue grouped by plan"""
    return service.revenue_report(start_date, end_date)


@router.get("/occupancy", response_model=OccupancyReport)
async def occupancy_report(
    start_date: date = Query(...),
    end_date: date = Query(...),
    service: ReportService = Depends(get_report_service),
):
    """Confirmed bookings against capacity per class"""
    return service.occupancy_report(start_date, end_date)


@router.get("/summary", response_model=MembershipSummary)
async def membership_summary(
    as_of: Optional[date] = Query(None),
    service: ReportService = Depends(get_report_service),
):
    return service.membership_summary(as_of)
