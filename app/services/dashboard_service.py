# app/services/dashboard_service.py
import calendar
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from app.models import FeePayment, Student

RECENT_TRANSACTIONS = 10
CHART_MONTHS = 6


def _first_of_month(year: int, month: int, offset: int = 0) -> date:
    """First day of the month `offset` months after (year, month)"""
    index = year * 12 + (month - 1) + offset
    return date(index // 12, index % 12 + 1, 1)


def _collected(db: Session, start: date, end: Optional[date] = None) -> Decimal:
    query = select(func.coalesce(func.sum(FeePayment.amount), 0)).where(FeePayment.payment_date >= start)
    if end is not None:
        query = query.where(FeePayment.payment_date < end)
    return Decimal(str(db.execute(query).scalar_one()))


def get_dashboard(db: Session, today: Optional[date] = None) -> dict:
    """Collection totals by payment date, active head count and recent activity"""
    today = today or date.today()
    month_start = date(today.year, today.month, 1)

    stats = {
        "today_collection": _collected(db, today, date.fromordinal(today.toordinal() + 1)),
        "monthly_collection": _collected(db, month_start, _first_of_month(today.year, today.month, 1)),
        "yearly_collection": _collected(db, date(today.year, 1, 1), date(today.year + 1, 1, 1)),
        "total_students": db.execute(
            select(func.count(Student.id)).where(Student.is_active.is_(True))
        ).scalar_one(),
    }

    recent = db.execute(
        select(FeePayment)
        .options(joinedload(FeePayment.student))
        .order_by(FeePayment.payment_date.desc(), FeePayment.created_at.desc())
        .limit(RECENT_TRANSACTIONS)
    ).scalars().all()

    monthly_stats = []
    for offset in range(-(CHART_MONTHS - 1), 1):
        start = _first_of_month(today.year, today.month, offset)
        end = _first_of_month(today.year, today.month, offset + 1)
        monthly_stats.append({
            "month": calendar.month_abbr[start.month],
            "year": start.year,
            "amount": _collected(db, start, end),
        })

    return {
        "stats": stats,
        "recent_transactions": recent,
        "monthly_stats": monthly_stats,
    }
