#!/usr/bin/env python3
# scripts/check_db.py - Check the SQLite database and list its backups
import sys
import os

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import func, inspect, select
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import settings
from app.core.db import db_manager
from app.core.errors import StorageError
from app.models import FeePayment, InstituteSetting, Student
from app.services.backup_service import BackupManager


def check_database() -> bool:
    """Print connection status, row counts and available backups"""
    print("Database Check")
    print("=" * 40)
    print(f"Database file: {settings.DATABASE_PATH}")
    print(f"Backup directory: {settings.BACKUP_DIR}")
    print("-" * 40)

    if not settings.DATABASE_PATH.exists():
        print("📝 Database file does not exist yet - it is created on first start")
        return True

    health = db_manager.health_check()
    if health["status"] != "healthy":
        print(f"❌ Connection failed: {health.get('error')}")
        return False
    print(f"✅ Connection successful ({health['response_time_ms']} ms)")

    try:
        tables = inspect(db_manager.get_engine()).get_table_names()
        print(f"Tables in database: {len(tables)}")
        with db_manager.transaction() as session:
            for model in (Student, FeePayment, InstituteSetting):
                if model.__tablename__ not in tables:
                    print(f"  - {model.__tablename__}: missing")
                    continue
                count = session.execute(select(func.count()).select_from(model)).scalar_one()
                print(f"  - {model.__tablename__}: {count} rows")
    except SQLAlchemyError as e:
        print(f"❌ Query failed: {e}")
        return False

    try:
        backups = BackupManager(settings.DATABASE_PATH, settings.BACKUP_DIR).list_backups()
    except StorageError as e:
        print(f"❌ Could not read backups: {e}")
        return False

    print(f"Backups: {len(backups)}")
    for info in backups:
        print(f"  - {info.filename} ({info.size}, {info.kind})")
    return True


if __name__ == "__main__":
    ok = check_database()
    db_manager.close()
    sys.exit(0 if ok else 1)
