# app/models/student.py
from __future__ import annotations
import uuid
from datetime import date, datetime
from sqlalchemy import String, Text, Date, DateTime, Boolean, Uuid, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import Base

COURSES = ("DOA", "DCA", "DCAC", "DDTP", "ADCA")


class Student(Base):
    __tablename__ = "students"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    father_name: Mapped[str] = mapped_column(String(128), nullable=False)
    aadhar_number: Mapped[str | None] = mapped_column(String(32), unique=True)
    address: Mapped[str | None] = mapped_column(Text)
    contact_number: Mapped[str | None] = mapped_column(String(32))
    course: Mapped[str] = mapped_column(String(8), nullable=False)
    photo_path: Mapped[str | None] = mapped_column(String(255))
    admission_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Deleting a student removes its payments as well
    fee_payments: Mapped[list["FeePayment"]] = relationship(
        "FeePayment",
        back_populates="student",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="FeePayment.payment_date.desc()",
    )

    __table_args__ = (
        CheckConstraint(
            "course IN ('DOA','DCA','DCAC','DDTP','ADCA')",
            name="ck_student_course",
        ),
    )

    @property
    def total_fees_paid(self):
        return sum((p.amount for p in self.fee_payments), start=0)

    def __repr__(self):
        return f"<Student(id={self.id}, name={self.name}, course={self.course})>"
