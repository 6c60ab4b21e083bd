# app/services/backup_service.py
"""
Point-in-time copies of the SQLite database file.

Explicit snapshots are named backup-<timestamp>.sqlite; the copy taken
automatically before a restore is named pre-restore-<timestamp>.sqlite.
Both are byte-for-byte copies of the live file.
"""
import os
import re
import shutil
import logging
import threading
from contextlib import nullcontext
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, ContextManager, Dict, List, Optional

from app.core.errors import Forbidden, NotFound, StorageError

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "backup"
SAFETY_PREFIX = "pre-restore"
BACKUP_SUFFIX = ".sqlite"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S-%fZ"
BACKUP_NAME_RE = re.compile(
    r"^(?P<kind>backup|pre-restore)-"
    r"(?P<stamp>\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}-\d{6}Z)\.sqlite$"
)

# One lock per live database file, shared by every manager pointing at it
_locks: Dict[str, threading.RLock] = {}
_locks_guard = threading.Lock()


def _lock_for(database_path: Path) -> threading.RLock:
    key = str(Path(database_path).resolve())
    with _locks_guard:
        if key not in _locks:
            _locks[key] = threading.RLock()
        return _locks[key]


def format_size(size_bytes: int) -> str:
    return f"{size_bytes / (1024 * 1024):.2f} MB"


def parse_backup_name(filename: str) -> Optional[dict]:
    """Kind and UTC creation time encoded in a backup filename, or None if it is not one"""
    match = BACKUP_NAME_RE.match(filename)
    if not match:
        return None
    created_at = datetime.strptime(match.group("stamp"), TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    return {"kind": match.group("kind"), "created_at": created_at}


@dataclass
class BackupResult:
    filename: str
    created_at: datetime


@dataclass
class BackupInfo:
    filename: str
    size: str
    size_bytes: int
    kind: str
    created_at: datetime


@dataclass
class RestoreResult:
    restored_from: str
    safety_backup: str


class BackupManager:
    """Creates, lists, restores and deletes snapshots of one database file"""

    def __init__(
        self,
        database_path,
        backup_dir,
        on_restore: Optional[Callable[[], None]] = None,
        store_guard: Optional[Callable[[], ContextManager]] = None,
    ):
        self.database_path = Path(database_path)
        self.backup_dir = Path(backup_dir)
        self.on_restore = on_restore
        # Held while the live file is read or replaced; keeps database sessions out
        self.store_guard = store_guard or nullcontext
        self._lock = _lock_for(self.database_path)

    def _next_name(self, prefix: str) -> tuple:
        now = datetime.now(timezone.utc)
        while True:
            filename = f"{prefix}-{now.strftime(TIMESTAMP_FORMAT)}{BACKUP_SUFFIX}"
            if not (self.backup_dir / filename).exists():
                return filename, now
            now += timedelta(microseconds=1)

    def _copy_atomic(self, source: Path, target: Path):
        """Copy to a temporary sibling, then rename over the target"""
        tmp = target.with_name(f".{target.name}.tmp")
        try:
            shutil.copyfile(source, tmp)
            os.replace(tmp, target)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise

    def _snapshot(self, prefix: str) -> BackupResult:
        if not self.database_path.is_file():
            raise StorageError(f"Database file not found: {self.database_path}")

        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            filename, created_at = self._next_name(prefix)
            self._copy_atomic(self.database_path, self.backup_dir / filename)
        except OSError as e:
            logger.error(f"Failed to write {prefix} snapshot: {e}")
            raise StorageError(f"Failed to create backup: {e}") from e

        logger.info(f"Snapshot written: {filename}")
        return BackupResult(filename=filename, created_at=created_at)

    def create_backup(self) -> BackupResult:
        with self._lock, self.store_guard():
            return self._snapshot(BACKUP_PREFIX)

    def list_backups(self) -> List[BackupInfo]:
        """Snapshots in the backup directory, newest first"""
        if not self.backup_dir.is_dir():
            return []

        backups = []
        try:
            for entry in self.backup_dir.iterdir():
                meta = parse_backup_name(entry.name)
                if meta is None or not entry.is_file():
                    continue
                size_bytes = entry.stat().st_size
                backups.append(BackupInfo(
                    filename=entry.name,
                    size=format_size(size_bytes),
                    size_bytes=size_bytes,
                    kind=meta["kind"],
                    created_at=meta["created_at"],
                ))
        except OSError as e:
            logger.error(f"Failed to list backups: {e}")
            raise StorageError(f"Failed to list backups: {e}") from e

        backups.sort(key=lambda b: b.created_at, reverse=True)
        return backups

    def resolve(self, filename: str) -> Path:
        """
        Path of an existing snapshot named by a caller.

        Raises Forbidden when the name points anywhere other than a direct
        child of the backup directory, NotFound when no such file exists or
        the name is not one list_backups would report.
        """
        if not filename or filename in (".", ".."):
            raise Forbidden("Invalid filename")

        backup_dir = Path(os.path.abspath(self.backup_dir))
        candidate = Path(os.path.normpath(backup_dir / filename))
        if candidate.parent != backup_dir:
            logger.warning(f"Rejected backup filename outside backup directory: {filename!r}")
            raise Forbidden("Invalid filename")

        if parse_backup_name(candidate.name) is None:
            logger.warning(f"Rejected file that is not a backup: {filename!r}")
            raise NotFound("Backup not found")

        if not candidate.is_file():
            raise NotFound("Backup not found")

        # Symlinks must not lead out of the directory either
        if candidate.resolve().parent != backup_dir.resolve():
            logger.warning(f"Rejected backup filename resolving outside backup directory: {filename!r}")
            raise Forbidden("Invalid filename")

        return candidate

    def download_path(self, filename: str) -> Path:
        return self.resolve(filename)

    def restore_backup(self, filename: str) -> RestoreResult:
        """
        Replace the live database with a snapshot.

        A pre-restore snapshot of the current file is always written first;
        if that fails the live file is left untouched.
        """
        with self._lock, self.store_guard():
            source = self.resolve(filename)
            safety = self._snapshot(SAFETY_PREFIX)

            if self.on_restore is not None:
                self.on_restore()

            try:
                self._copy_atomic(source, self.database_path)
            except OSError as e:
                logger.error(f"Failed to restore {source.name}: {e}. Current data kept in {safety.filename}")
                raise StorageError(f"Failed to restore backup: {e}") from e

            logger.info(f"Database restored from {source.name} (previous state in {safety.filename})")
            return RestoreResult(restored_from=source.name, safety_backup=safety.filename)

    def delete_backup(self, filename: str) -> None:
        with self._lock:
            path = self.resolve(filename)
            try:
                path.unlink()
            except FileNotFoundError:
                raise NotFound("Backup not found")
            except OSError as e:
                logger.error(f"Failed to delete backup {filename}: {e}")
                raise StorageError(f"Failed to delete backup: {e}") from e
            logger.info(f"Backup deleted: {filename}")
