# app/schemas/dues.py
from pydantic import BaseModel
from typing import List, Optional
from datetime import date
from uuid import UUID


class DueStudentOut(BaseModel):
    id: UUID
    name: str
    father_name: str
    course: str
    contact_number: Optional[str]
    admission_date: date
    current_due: float
    previous_due_months: int
    previous_due_amount: float
    previous_due_periods: List[str]
    total_due: float


class DueReportOut(BaseModel):
    month: str
    year: int
    total_students: int
    current_due_total: float
    previous_due_total: float
    grand_total: float
    students: List[DueStudentOut]


class ArrearsOut(BaseModel):
    """Unpaid months in the six before the selected month"""
    student_id: UUID
    month: str
    year: int
    periods_owed: int
    amount_owed: float
    periods: List[str]
