# app/api/routers/dues.py
from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session
from sqlalchemy import select
from typing import Optional
from datetime import date
import logging

from app.core.db import get_db
from app.api.deps.services import get_fee_policy
from app.models.student import Student
from app.models.payment import FeePayment, MONTHS
from app.schemas.dues import DueReportOut, DueStudentOut
from app.schemas.payment import Month
from app.schemas.student import Course
from app.services.dues import DueReport, FeePolicy, build_due_report
from app.services.export_service import due_report_to_csv

logger = logging.getLogger(__name__)
router = APIRouter()


def load_due_report(
    db: Session,
    fee_policy: FeePolicy,
    month: Optional[str],
    year: Optional[int],
    search: Optional[str],
    course: Optional[str],
) -> DueReport:
    """Run the due computation over active students and every payment on record"""
    today = date.today()
    month = month or MONTHS[today.month - 1]
    year = year or today.year

    students = db.execute(
        select(Student)
        .where(Student.is_active.is_(True))
        .order_by(Student.created_at.desc())
    ).scalars().all()
    payments = db.execute(
        select(FeePayment).where(FeePayment.year.in_([year - 1, year]))
    ).scalars().all()

    report = build_due_report(
        students, payments, month, year,
        fee_policy=fee_policy, search=search, course=course,
    )
    logger.info(f"Due list {month} {year}: {report.total_students} students, total {report.grand_total}")
    return report


@router.get("/", response_model=DueReportOut)
async def get_due_list(
    month: Optional[Month] = Query(None, description="Defaults to the current month"),
    year: Optional[int] = Query(None, ge=2000, le=2100, description="Defaults to the current year"),
    search: Optional[str] = Query(None),
    course: Optional[Course] = Query(None),
    db: Session = Depends(get_db),
    fee_policy: FeePolicy = Depends(get_fee_policy),
):
    """Active students who have not paid for the month, with their previous dues"""
    report = load_due_report(db, fee_policy, month, year, search, course)
    return DueReportOut(
        month=report.month,
        year=report.year,
        total_students=report.total_students,
        current_due_total=report.current_due_total,
        previous_due_total=report.previous_due_total,
        grand_total=report.grand_total,
        students=[
            DueStudentOut(
                id=entry.student.id,
                name=entry.student.name,
                father_name=entry.student.father_name,
                course=entry.student.course,
                contact_number=entry.student.contact_number,
                admission_date=entry.student.admission_date,
                current_due=entry.current_due,
                previous_due_months=entry.arrears.periods_owed,
                previous_due_amount=entry.arrears.amount_owed,
                previous_due_periods=[str(p) for p in entry.arrears.periods],
                total_due=entry.total_due,
            )
            for entry in report.entries
        ],
    )


@router.get("/export")
async def export_due_list(
    month: Optional[Month] = Query(None),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    search: Optional[str] = Query(None),
    course: Optional[Course] = Query(None),
    db: Session = Depends(get_db),
    fee_policy: FeePolicy = Depends(get_fee_policy),
):
    """Due list as CSV"""
    report = load_due_report(db, fee_policy, month, year, search, course)
    filename = f"DueList_{report.month}_{report.year}.csv"
    return Response(
        content=due_report_to_csv(report),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
