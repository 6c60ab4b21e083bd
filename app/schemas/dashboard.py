# app/schemas/dashboard.py
from pydantic import BaseModel
from typing import List

from app.schemas.payment import PaymentOut


class DashboardStats(BaseModel):
    today_collection: float
    monthly_collection: float
    yearly_collection: float
    total_students: int


class MonthlyStat(BaseModel):
    month: str
    year: int
    amount: float


class DashboardOut(BaseModel):
    stats: DashboardStats
    recent_transactions: List[PaymentOut]
    monthly_stats: List[MonthlyStat]
