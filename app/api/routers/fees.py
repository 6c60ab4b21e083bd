# app/api/routers/fees.py
from fastapi import APIRouter, Depends, HTTPException, status, Query
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import select
from typing import List, Optional
from uuid import UUID
from datetime import date
import logging

from app.core.db import get_db
from app.models.student import Student
from app.models.payment import FeePayment
from app.models.institute_setting import InstituteSetting
from app.schemas.payment import PaymentCreate, PaymentOut, Month
from app.services.export_service import payments_to_csv
from app.services.receipt_service import render_receipt

logger = logging.getLogger(__name__)
router = APIRouter()


def filter_payments(
    db: Session,
    student_id: Optional[UUID] = None,
    month: Optional[str] = None,
    year: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[FeePayment]:
    query = (
        select(FeePayment)
        .options(joinedload(FeePayment.student))
        .order_by(FeePayment.payment_date.desc(), FeePayment.created_at.desc())
    )
    if student_id:
        query = query.where(FeePayment.student_id == student_id)
    if month:
        query = query.where(FeePayment.month == month)
    if year:
        query = query.where(FeePayment.year == year)
    if start_date:
        query = query.where(FeePayment.payment_date >= start_date)
    if end_date:
        query = query.where(FeePayment.payment_date <= end_date)
    return db.execute(query).scalars().all()


def get_payment_or_404(db: Session, payment_id: UUID) -> FeePayment:
    payment = db.execute(
        select(FeePayment)
        .options(joinedload(FeePayment.student))
        .where(FeePayment.id == payment_id)
    ).scalar_one_or_none()

    if not payment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
    return payment


@router.get("/", response_model=List[PaymentOut])
async def list_payments(
    db: Session = Depends(get_db),
    student_id: Optional[UUID] = Query(None),
    month: Optional[Month] = Query(None),
    year: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None, description="Payment date on or after"),
    end_date: Optional[date] = Query(None, description="Payment date on or before"),
):
    """Payment history, newest payment date first"""
    return filter_payments(db, student_id, month, year, start_date, end_date)


@router.get("/export")
async def export_payments(
    db: Session = Depends(get_db),
    student_id: Optional[UUID] = Query(None),
    month: Optional[Month] = Query(None),
    year: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
):
    """Payment history as CSV"""
    payments = filter_payments(db, student_id, month, year, start_date, end_date)
    filename = f"PaymentHistory_{date.today().isoformat()}.csv"
    return Response(
        content=payments_to_csv(payments),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/", response_model=PaymentOut, status_code=status.HTTP_201_CREATED)
async def record_payment(data: PaymentCreate, db: Session = Depends(get_db)):
    """Record a monthly fee payment. Repeat payments for the same month are accepted."""
    student = db.get(Student, data.student_id)
    if not student:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found")

    payment = FeePayment(
        student_id=student.id,
        month=data.month,
        year=data.year,
        amount=data.amount,
        remarks=data.remarks,
        payment_date=data.payment_date or date.today(),
    )
    db.add(payment)
    db.commit()

    logger.info(f"Payment recorded: {student.name} {payment.month} {payment.year} amount={payment.amount}")
    return get_payment_or_404(db, payment.id)


@router.delete("/{payment_id}")
async def delete_payment(payment_id: UUID, db: Session = Depends(get_db)):
    payment = get_payment_or_404(db, payment_id)
    db.delete(payment)
    db.commit()

    logger.info(f"Payment deleted: {payment_id}")
    return {"message": "Payment deleted successfully"}


@router.get("/{payment_id}/receipt", response_class=HTMLResponse)
async def payment_receipt(
    payment_id: UUID,
    print_on_load: bool = Query(False, alias="print"),
    db: Session = Depends(get_db),
):
    """Printable HTML receipt for one payment"""
    payment = get_payment_or_404(db, payment_id)
    institute = db.execute(select(InstituteSetting)).scalars().first()
    return HTMLResponse(render_receipt(payment, institute, auto_print=print_on_load))
