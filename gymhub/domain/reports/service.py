"""
Report service - Read-only rollups for the gym dashboard

Revenue, class occupancy, member visit statistics and a membership status
summary. Nothing here writes to the database.
"""

import logging
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...config import EXPIRING_SOON_DAYS
from ...models import AttendanceType, SubscriptionStatus
from ...shared.errors import ValidationError
from ..discounts.pricing import ZERO, to_money
from ..members.service import MemberService
from .repository import ReportRepository

logger = logging.getLogger(__name__)

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def _day_range(start_date: date, end_date: date) -> tuple[datetime, datetime]:
    """Inclusive date range as [start, end) datetimes"""
    if start_date > end_date:
        raise ValidationError("Start date must be on or before end date")
    start = datetime.combine(start_date, datetime.min.time())
    end = datetime.combine(end_date + timedelta(days=1), datetime.min.time())
    return start, end


class ReportService:
    """Service layer for reports"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ReportRepository()

    def revenue_report(self, start_date: date, end_date: date) -> dict:
        start, end = _day_range(start_date, end_date)
        rows = self.repo.get_revenue_by_plan(self.db, start, end)

        by_plan = [
            {
                "plan_id": plan_id,
                "plan_name": plan_name,
                "subscriptions": count,
                "original_total": to_money(original or 0),
                "discount_total": to_money(discount or 0),
                "final_total": to_money(final or 0),
            }
            for plan_id, plan_name, count, original, discount, final in rows
        ]

        report = {
            "start_date": start_date,
            "end_date": end_date,
            "subscriptions": sum(p["subscriptions"] for p in by_plan),
            "original_total": sum((p["original_total"] for p in by_plan), ZERO),
            "discount_total": sum((p["discount_total"] for p in by_plan), ZERO),
            "final_total": sum((p["final_total"] for p in by_plan), ZERO),
            "by_plan": by_plan,
        }
        logger.info(
            f"📊 Revenue {start_date} → {end_date}: {report['subscriptions']} subscription(s), "
            f"{report['final_total']}"
        )
        return report

    def occupancy_report(self, start_date: date, end_date: date) -> dict:
        start, end = _day_range(start_date, end_date)
        classes = []
        for gym_class, booked in self.repo.get_class_occupancy(self.db, start, end):
            classes.append(
                {
                    "class_id": gym_class.id,
                    "name": gym_class.name,
                    "start_time": gym_class.start_time,
                    "capacity": gym_class.capacity,
                    "booked": booked,
                    "occupancy": round(booked / gym_class.capacity, 2) if gym_class.capacity else 0.0,
                }
            )

        average = round(sum(c["occupancy"] for c in classes) / len(classes), 2) if classes else 0.0
        return {
            "start_date": start_date,
            "end_date": end_date,
            "classes": classes,
            "average_occupancy": average,
        }

    def member_attendance_report(self, member_id: int, start_date: date, end_date: date) -> dict:
        member = MemberService(self.db).get_member(member_id)
        start, end = _day_range(start_date, end_date)
        rows = self.repo.get_member_check_ins(self.db, member.id, start, end)

        gym_visits = sum(1 for kind, _ in rows if kind == AttendanceType.GYM_VISIT)
        class_attendances = sum(1 for kind, _ in rows if kind == AttendanceType.CLASS_ATTENDANCE)
        total = len(rows)

        weeks = max(1, (end_date - start_date).days / 7)
        hours = Counter(check_in.hour for _, check_in in rows)
        days = Counter(check_in.weekday() for _, check_in in rows)

        return {
            "member_id": member.id,
            "member_name": member.full_name,
            "start_date": start_date,
            "end_date": end_date,
            "total_gym_visits": gym_visits,
            "total_class_attendances": class_attendances,
            "total_visits": total,
            "average_visits_per_week": round(total / weeks, 2),
            "peak_visit_hours": [
                {"hour": hour, "count": count} for hour, count in hours.most_common(5)
            ],
            "visits_by_day_of_week": [
                {"day_of_week": DAY_NAMES[day], "count": count} for day, count in days.most_common()
            ],
        }

    def membership_summary(self, as_of: Optional[date] = None) -> dict:
        as_of = as_of or datetime.utcnow().date()
        counts = {status: 0 for status in (*SubscriptionStatus.CURRENT, *SubscriptionStatus.TERMINAL)}
        counts.update(self.repo.count_by_status(self.db))

        until = as_of + timedelta(days=EXPIRING_SOON_DAYS)
        expiring = [
            {
                "subscription_id": s.id,
                "member_id": s.member_id,
                "plan_id": s.plan_id,
                "status": s.status,
                "end_date": s.end_date,
                "days_left": (s.end_date - as_of).days,
            }
            for s in self.repo.get_expiring(self.db, as_of, until)
        ]

        return {
            "as_of": as_of,
            "counts": counts,
            "current_total": sum(counts[s] for s in SubscriptionStatus.CURRENT),
            "expiring_soon": expiring,
            "expiring_window_days": EXPIRING_SOON_DAYS,
        }
