# app/api/deps/services.py
from app.core.config import settings
from app.core.db import db_manager
from app.services.backup_service import BackupManager
from app.services.dues import FeePolicy, flat_fee_policy
from app.services.file_service import FileService


def get_backup_manager() -> BackupManager:
    """Backup manager for the configured database; sessions are kept out while the file is copied or replaced"""
    return BackupManager(
        database_path=settings.DATABASE_PATH,
        backup_dir=settings.BACKUP_DIR,
        on_restore=db_manager.close,
        store_guard=db_manager.exclusive,
    )


def get_file_service() -> FileService:
    return FileService(settings.UPLOAD_DIR)


def get_fee_policy() -> FeePolicy:
    return flat_fee_policy(settings.MONTHLY_FEE)
