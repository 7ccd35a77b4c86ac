"""Attendance router - FastAPI endpoints for check-in and check-out"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_db
from ..reports.schemas import MemberAttendanceReport
from ..reports.service import ReportService
from .schemas import AttendanceListResponse, AttendanceResponse, CheckInRequest, QrCheckInRequest
from .service import AttendanceService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/attendance", tags=["Attendance"])


def get_attendance_service(
    background_tasks: BackgroundTasks, db: Session = Depends(get_db)
) -> AttendanceService:
    """Dependency injection for AttendanceService; notifications go out after the response"""
    return AttendanceService(db, background_tasks=background_tasks)


@router.post("/check-in", response_model=AttendanceResponse, status_code=201)
async def check_in(
    body: CheckInRequest,
    service: AttendanceService = Depends(get_attendance_service),
):
    """Check a member in for a gym visit or a booked class"""
    return service.check_in(body.member_id, body.type, body.class_id)


@router.post("/qr-check-in", response_model=AttendanceResponse, status_code=201)
async def qr_check_in(
    body: QrCheckInRequest,
    service: AttendanceService = Depends(get_attendance_service),
):
    """Check a member in by scanning their QR code"""
    return service.qr_check_in(body.token)


@router.post("/{attendance_id}/check-out", response_model=AttendanceResponse)
async def check_out(
    attendance_id: int,
    service: AttendanceService = Depends(get_attendance_service),
):
    return service.check_out(attendance_id)


@router.get("", response_model=AttendanceListResponse)
async def list_attendance(
    member_id: Optional[int] = Query(None),
    type: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    service: AttendanceService = Depends(get_attendance_service),
):
    """List attendance records with optional filters"""
    return service.list_attendance(member_id, type, start_date, end_date, page, limit)


@router.get("/report/{member_id}", response_model=MemberAttendanceReport)
async def member_attendance_report(
    member_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: Session = Depends(get_db),
):
    """Visit statistics for one member over a date range"""
    return ReportService(db).member_attendance_report(member_id, start_date, end_date)
