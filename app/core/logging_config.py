# app/core/logging_config.py - Logging setup driven by settings
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from app.core.config import settings

FORMATS = {
    "simple": "%(levelname)s - %(message)s",
    "detailed": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}


def configure_logging() -> None:
    """Configure root logging once: console always, rotating file when LOG_FILE_PATH is set"""
    root = logging.getLogger()
    if getattr(root, "_institute_configured", False):
        return

    formatter = logging.Formatter(FORMATS[settings.LOG_FORMAT])
    root.setLevel(settings.LOG_LEVEL)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    if settings.LOG_FILE_PATH:
        log_path = Path(settings.LOG_FILE_PATH)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=settings.LOG_MAX_SIZE,
            backupCount=settings.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # SQL echo goes through the sqlalchemy logger
    if settings.DATABASE_ECHO:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    root._institute_configured = True
