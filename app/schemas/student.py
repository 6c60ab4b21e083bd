# app/schemas/student.py
from pydantic import BaseModel, field_validator
from typing import Optional, List, Literal
from datetime import date, datetime
from uuid import UUID

Course = Literal["DOA", "DCA", "DCAC", "DDTP", "ADCA"]


def _blank_to_none(v):
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


class StudentCreate(BaseModel):
    name: str
    father_name: str
    aadhar_number: Optional[str] = None
    address: Optional[str] = None
    contact_number: Optional[str] = None
    course: Course
    admission_date: Optional[date] = None

    @field_validator('name', 'father_name')
    @classmethod
    def validate_names(cls, v):
        if not v or not v.strip():
            raise ValueError('Name cannot be empty')
        return v.strip()

    @field_validator('aadhar_number', 'address', 'contact_number', mode='before')
    @classmethod
    def blank_optional_fields(cls, v):
        # Empty form fields are stored as NULL so the unique Aadhaar index ignores them
        return _blank_to_none(v)


class StudentUpdate(BaseModel):
    name: Optional[str] = None
    father_name: Optional[str] = None
    aadhar_number: Optional[str] = None
    address: Optional[str] = None
    contact_number: Optional[str] = None
    course: Optional[Course] = None
    admission_date: Optional[date] = None
    is_active: Optional[bool] = None

    @field_validator('name', 'father_name')
    @classmethod
    def validate_names(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Name cannot be empty')
        return v.strip() if v else v

    @field_validator('aadhar_number', 'address', 'contact_number', mode='before')
    @classmethod
    def blank_optional_fields(cls, v):
        return _blank_to_none(v)


class StudentSummary(BaseModel):
    id: UUID
    name: str
    father_name: str
    course: str
    contact_number: Optional[str] = None

    class Config:
        from_attributes = True


class StudentPayment(BaseModel):
    id: UUID
    month: str
    year: int
    amount: float
    remarks: Optional[str]
    payment_date: date

    class Config:
        from_attributes = True


class StudentOut(BaseModel):
    id: UUID
    name: str
    father_name: str
    aadhar_number: Optional[str]
    address: Optional[str]
    contact_number: Optional[str]
    course: str
    photo_path: Optional[str]
    admission_date: date
    is_active: bool
    created_at: datetime
    updated_at: datetime
    total_fees_paid: float
    fee_payments: List[StudentPayment] = []

    class Config:
        from_attributes = True
