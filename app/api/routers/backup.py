# app/api/routers/backup.py
from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse
from typing import List
import logging

from app.api.deps.services import get_backup_manager
from app.schemas.backup import BackupCreated, BackupInfoOut, RestoreOut, MessageOut
from app.services.backup_service import BackupManager

logger = logging.getLogger(__name__)
router = APIRouter()

# Plain def handlers run in the threadpool; create and restore wait for open sessions to close


@router.post("/", response_model=BackupCreated)
def create_backup(manager: BackupManager = Depends(get_backup_manager)):
    result = manager.create_backup()
    return BackupCreated(
        message="Backup created successfully",
        filename=result.filename,
        created_at=result.created_at,
    )


@router.get("/", response_model=List[BackupInfoOut])
def list_backups(manager: BackupManager = Depends(get_backup_manager)):
    """Backups newest first; empty when none have been taken yet"""
    return manager.list_backups()


@router.get("/{filename}")
def download_backup(filename: str, manager: BackupManager = Depends(get_backup_manager)):
    path = manager.download_path(filename)
    return FileResponse(path, media_type="application/octet-stream", filename=path.name)


@router.post("/restore/{filename}", response_model=RestoreOut)
def restore_backup(filename: str, manager: BackupManager = Depends(get_backup_manager)):
    """Replace the live database with a backup after saving a pre-restore copy"""
    result = manager.restore_backup(filename)
    return RestoreOut(
        message="Database restored successfully",
        restored_from=result.restored_from,
        previous_backup=result.safety_backup,
    )


@router.delete("/{filename}", response_model=MessageOut)
def delete_backup(filename: str, manager: BackupManager = Depends(get_backup_manager)):
    manager.delete_backup(filename)
    return MessageOut(message="Backup deleted successfully")
