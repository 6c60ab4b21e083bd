# app/services/file_service.py
import logging
import secrets
import shutil
import time
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from app.core.config import settings
from app.core.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads/"
IMAGE_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif"}


class FileService:
    """Stores uploaded images on local disk and serves them under /uploads"""

    def __init__(self, upload_dir: Optional[Path] = None):
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)

    def _validate(self, file: UploadFile) -> str:
        extension = Path(file.filename or "").suffix.lower()
        if extension not in settings.ALLOWED_IMAGE_TYPES or file.content_type not in IMAGE_CONTENT_TYPES:
            raise ValidationError("Only image files are allowed")
        if file.size is not None and file.size > settings.max_upload_size_bytes:
            raise ValidationError(f"File too large. Maximum size is {settings.MAX_UPLOAD_SIZE_MB}MB.")
        return extension

    def save_image(self, file: UploadFile, field_name: str) -> str:
        """Save an uploaded image and return its public path"""
        extension = self._validate(file)
        unique_suffix = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
        filename = f"{field_name}-{unique_suffix}{extension}"

        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
            with open(self.upload_dir / filename, "wb") as buffer:
                shutil.copyfileobj(file.file, buffer)
        except OSError as e:
            logger.error(f"File upload failed: {e}")
            raise StorageError(f"Failed to store upload: {e}") from e

        logger.info(f"Stored upload {filename}")
        return f"{PUBLIC_PREFIX}{filename}"

    def delete(self, public_path: Optional[str]) -> bool:
        """Remove a previously stored upload; returns False when there was nothing to remove"""
        if not public_path or not public_path.startswith(PUBLIC_PREFIX):
            return False
        name = Path(public_path[len(PUBLIC_PREFIX):]).name
        path = self.upload_dir / name
        if not path.is_file():
            return False
        try:
            path.unlink()
        except OSError as e:
            logger.error(f"File deletion failed: {e}")
            raise StorageError(f"Failed to delete upload: {e}") from e
        logger.info(f"Deleted upload {name}")
        return True

    def discard(self, public_path: Optional[str]) -> bool:
        """Like delete, for cleanup after the database change is final: failures are logged, not raised"""
        try:
            return self.delete(public_path)
        except StorageError as e:
            logger.error(f"Could not remove upload {public_path}: {e}")
            return False
