# app/schemas/payment.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from app.schemas.student import StudentSummary

Month = Literal[
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


class PaymentCreate(BaseModel):
    student_id: UUID
    month: Month
    year: int = Field(..., ge=2000, le=2100)
    amount: Decimal = Field(..., ge=0)
    remarks: Optional[str] = None
    payment_date: Optional[date] = None  # Defaults to today; may be backdated

    @field_validator('amount')
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        """Store amounts with two decimal places"""
        return v.quantize(Decimal('0.01'))

    @field_validator('remarks')
    @classmethod
    def strip_remarks(cls, v):
        if v is None:
            return v
        return v.strip() or None


class PaymentOut(BaseModel):
    id: UUID
    student_id: UUID
    month: str
    year: int
    amount: float
    remarks: Optional[str]
    payment_date: date
    created_at: datetime
    student: Optional[StudentSummary] = None

    class Config:
        from_attributes = True
