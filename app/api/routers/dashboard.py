# app/api/routers/dashboard.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.db import get_db
from app.schemas.dashboard import DashboardOut
from app.services.dashboard_service import get_dashboard

router = APIRouter()


@router.get("/", response_model=DashboardOut)
async def dashboard(db: Session = Depends(get_db)):
    """Collection totals for today, this month and this year plus a six-month chart"""
    return get_dashboard(db)
