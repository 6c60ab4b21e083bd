# app/schemas/backup.py
from pydantic import BaseModel
from datetime import datetime
from typing import Literal


class BackupCreated(BaseModel):
    message: str
    filename: str
    created_at: datetime


class BackupInfoOut(BaseModel):
    filename: str
    size: str
    size_bytes: int
    kind: Literal["backup", "pre-restore"]
    created_at: datetime

    class Config:
        from_attributes = True


class RestoreOut(BaseModel):
    message: str
    restored_from: str
    previous_backup: str


class MessageOut(BaseModel):
    message: str
