# app/api/routers/institute_settings.py
from fastapi import APIRouter, Depends, Form, File, UploadFile
from sqlalchemy.orm import Session
from sqlalchemy import select
from typing import Optional
import logging

from app.core.db import get_db
from app.api.deps.forms import parse_form
from app.api.deps.services import get_file_service
from app.core.errors import NotFound
from app.models.institute_setting import InstituteSetting
from app.schemas.institute_setting import InstituteSettingOut, InstituteSettingUpdate
from app.services.file_service import FileService

logger = logging.getLogger(__name__)
router = APIRouter()


def get_settings_row(db: Session) -> InstituteSetting:
    row = db.execute(select(InstituteSetting)).scalars().first()
    if row is None:
        raise NotFound("Institute settings not initialised")
    return row


@router.get("/", response_model=InstituteSettingOut)
async def read_settings(db: Session = Depends(get_db)):
    return get_settings_row(db)


@router.put("/", response_model=InstituteSettingOut)
async def update_settings(
    institute_name: Optional[str] = Form(None),
    institute_address: Optional[str] = Form(None),
    institute_phone: Optional[str] = Form(None),
    institute_email: Optional[str] = Form(None),
    receipt_prefix: Optional[str] = Form(None),
    logo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    files: FileService = Depends(get_file_service),
):
    """Update branding; a new logo replaces the old file"""
    row = get_settings_row(db)
    data = parse_form(
        InstituteSettingUpdate,
        institute_name=institute_name,
        institute_address=institute_address,
        institute_phone=institute_phone,
        institute_email=institute_email,
        receipt_prefix=receipt_prefix,
    )

    for field, value in data.model_dump(exclude_none=True).items():
        setattr(row, field, value)

    old_logo = None
    if logo and logo.filename:
        old_logo = row.logo_path
        row.logo_path = files.save_image(logo, "logo")

    db.commit()
    db.refresh(row)

    if old_logo:
        files.discard(old_logo)

    logger.info("Institute settings updated")
    return row
