# app/models/payment.py
from __future__ import annotations
import uuid
from datetime import date, datetime
from decimal import Decimal
from sqlalchemy import String, Text, Integer, Numeric, Date, DateTime, ForeignKey, CheckConstraint, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import Base

MONTHS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


class FeePayment(Base):
    __tablename__ = "fee_payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    student_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True
    )
    month: Mapped[str] = mapped_column(String(16), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    remarks: Mapped[str | None] = mapped_column(Text)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    student: Mapped["Student"] = relationship("Student", back_populates="fee_payments")

    # No uniqueness on (student, month, year): repeat payments for a period are allowed
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_fee_payment_amount_non_negative"),
        CheckConstraint(
            "month IN ('January','February','March','April','May','June',"
            "'July','August','September','October','November','December')",
            name="ck_fee_payment_month",
        ),
        Index("ix_fee_payments_period", "student_id", "year", "month"),
    )

    def __repr__(self):
        return f"<FeePayment(student_id={self.student_id}, period={self.month} {self.year}, amount={self.amount})>"
