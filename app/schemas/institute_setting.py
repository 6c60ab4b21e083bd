# app/schemas/institute_setting.py
from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime


class InstituteSettingUpdate(BaseModel):
    institute_name: Optional[str] = None
    institute_address: Optional[str] = None
    institute_phone: Optional[str] = None
    institute_email: Optional[str] = None
    receipt_prefix: Optional[str] = None

    @field_validator('institute_name')
    @classmethod
    def validate_name(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Institute name cannot be empty')
        return v.strip() if v else v

    @field_validator('receipt_prefix')
    @classmethod
    def validate_prefix(cls, v):
        if v is None:
            return v
        v = v.strip().upper()
        if not v or len(v) > 16 or not v.replace("-", "").isalnum():
            raise ValueError('Receipt prefix must be 1-16 letters, digits or dashes')
        return v


class InstituteSettingOut(BaseModel):
    id: int
    institute_name: str
    institute_address: str
    institute_phone: str
    institute_email: str
    logo_path: Optional[str]
    receipt_prefix: str
    updated_at: datetime

    class Config:
        from_attributes = True
