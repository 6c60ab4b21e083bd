# app/models/__init__.py - Import all models so SQLAlchemy can discover them

from app.models.base import Base

from app.models.student import Student, COURSES
from app.models.payment import FeePayment, MONTHS
from app.models.institute_setting import InstituteSetting

# Export the Base for other modules
__all__ = [
    "Base",
    "Student",
    "FeePayment",
    "InstituteSetting",
    "COURSES",
    "MONTHS",
]
