# app/models/institute_setting.py
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base


class InstituteSetting(Base):
    """Single-row table with branding shown on receipts"""

    __tablename__ = "institute_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    institute_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    institute_address: Mapped[str] = mapped_column(Text, nullable=False, default="")
    institute_phone: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    institute_email: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    logo_path: Mapped[str | None] = mapped_column(String(255))
    receipt_prefix: Mapped[str] = mapped_column(String(16), nullable=False, default="JNN")

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<InstituteSetting(institute_name={self.institute_name}, receipt_prefix={self.receipt_prefix})>"
