"""Report schemas - Response models for read-only rollups"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel


class PlanRevenue(BaseModel):
    plan_id: int
    plan_name: str
    subscriptions: int
    original_total: Decimal
    discount_total: Decimal
    final_total: Decimal


class RevenueReport(BaseModel):
    start_date: date
    end_date: date
    subscriptions: int
    original_total: Decimal
    discount_total: Decimal
    final_total: Decimal
    by_plan: list[PlanRevenue]


class ClassOccupancy(BaseModel):
    class_id: int
    name: str
    start_time: datetime
    capacity: int
    booked: int
    occupancy: float


class OccupancyReport(BaseModel):
    start_date: date
    end_date: date
    classes: list[ClassOccupancy]
    average_occupancy: float


class HourCount(BaseModel):
    hour: int
    count: int


class DayCount(BaseModel):
    day_of_week: str
    count: int


class MemberAttendanceReport(BaseModel):
    member_id: int
    member_name: str
    start_date: date
    end_date: date
    total_gym_visits: int
    total_class_attendances: int
    total_visits: int
    average_visits_per_week: float
    peak_visit_hours: list[HourCount]
    visits_by_day_of_week: list[DayCount]


class ExpiringMembership(BaseModel):
    subscription_id: int
    member_id: int
    plan_id: int
    status: str
    end_date: date
    days_left: int


class MembershipSummary(BaseModel):
    as_of: date
    counts: dict[str, int]
    current_total: int
    expiring_soon: list[ExpiringMembership]
    expiring_window_days: int
