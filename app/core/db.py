# app/core/db.py - SQLAlchemy database setup for the SQLite store
from sqlalchemy import create_engine, text, event, select
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.engine import Engine
from typing import Generator, Optional
from pathlib import Path
import logging
import time
import threading
from contextlib import contextmanager

from app.core.config import settings

# Configure logging
logger = logging.getLogger(__name__)


class StoreGate:
    """
    Shared access for database sessions, exclusive access for replacing the
    database file. Waiting exclusive callers block new shared entries.

    Not tied to a thread: FastAPI may open and close a yield dependency on
    different worker threads.
    """

    def __init__(self):
        self._cond = threading.Condition()
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def shared(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def exclusive(self):
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class DatabaseManager:
    """Database manager owning the engine and session factory"""

    def __init__(self):
        self.engine: Optional[Engine] = None
        self.SessionLocal: Optional[sessionmaker] = None
        self._initialized = False
        self._lock = threading.Lock()
        self._gate = StoreGate()

    def initialize(self):
        """Initialize database engine and session maker"""
        if self._initialized:
            return

        with self._lock:
            if self._initialized:
                return

            try:
                Path(settings.DATABASE_PATH).parent.mkdir(parents=True, exist_ok=True)
                self.engine = self._create_engine()
                self.SessionLocal = sessionmaker(
                    autocommit=False,
                    autoflush=False,
                    bind=self.engine
                )

                self._setup_event_listeners()
                self._test_connection()

                self._initialized = True
                logger.info(f"Database initialized at {settings.DATABASE_PATH}")

            except Exception as e:
                logger.error(f"Failed to initialize database: {e}")
                raise

    def _create_engine(self) -> Engine:
        """Create SQLAlchemy engine for the SQLite file"""
        return create_engine(
            settings.database_url,
            echo=settings.DATABASE_ECHO,
            connect_args={
                "check_same_thread": False,
                "timeout": 30,  # 30 second timeout for SQLite locks
            },
        )

    def _setup_event_listeners(self):
        """Set up SQLAlchemy event listeners"""

        @event.listens_for(self.engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            """Set SQLite pragmas on every new connection"""
            cursor = dbapi_connection.cursor()
            # Rollback journal keeps the whole store in one file, so a file copy is a full snapshot
            cursor.execute("PRAGMA journal_mode=DELETE")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(self.engine, "before_cursor_execute")
        def receive_before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            if settings.is_development:
                context._query_start_time = time.time()

        @event.listens_for(self.engine, "after_cursor_execute")
        def receive_after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
            """Log slow queries in development"""
            if settings.is_development and hasattr(context, '_query_start_time'):
                total = time.time() - context._query_start_time
                if total > 0.1:
                    logger.warning(f"Slow query ({total:.3f}s): {statement[:100]}...")

    def _test_connection(self):
        """Test database connection and log status"""
        try:
            with self.engine.connect() as conn:
                db_info = conn.execute(text("SELECT sqlite_version()")).fetchone()
                logger.info(f"Connected to SQLite: {db_info[0]}")
        except Exception as e:
            logger.error(f"Database connection test failed: {e}")
            raise

    def get_session(self) -> Generator[Session, None, None]:
        """
        Get database session with automatic cleanup and error handling.

        Yields:
            Session: SQLAlchemy database session
        """
        with self._gate.shared():
            if not self._initialized:
                self.initialize()

            session = self.SessionLocal()
            try:
                yield session
            except Exception as e:
                session.rollback()
                logger.error(f"Database session error: {e}")
                raise
            finally:
                session.close()

    @contextmanager
    def transaction(self):
        """
        Context manager for database transactions with automatic rollback.

        Usage:
            with db_manager.transaction() as session:
                session.add(student)
                # Automatically commits on success, rolls back on error
        """
        with self._gate.shared():
            if not self._initialized:
                self.initialize()

            session = self.SessionLocal()
            try:
                yield session
                session.commit()
            except Exception as e:
                session.rollback()
                logger.error(f"Transaction error: {e}")
                raise
            finally:
                session.close()

    def health_check(self) -> dict:
        """
        Perform database health check.

        Returns:
            Dict with health status information
        """
        try:
            start_time = time.time()
            with self._gate.shared(), self.get_engine().connect() as conn:
                conn.execute(text("SELECT 1"))
            response_time = (time.time() - start_time) * 1000

            return {
                "status": "healthy",
                "response_time_ms": round(response_time, 2),
                "database": str(settings.DATABASE_PATH),
            }
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return {
                "status": "unhealthy",
                "error": str(e)
            }

    def get_engine(self) -> Engine:
        if not self._initialized:
            self.initialize()
        return self.engine

    def get_session_factory(self) -> sessionmaker:
        """Get session maker for manual session creation"""
        if not self._initialized:
            self.initialize()
        return self.SessionLocal

    def exclusive(self):
        """
        Wait for open sessions to finish and keep new ones out.

        Used while the database file is copied or replaced.
        """
        return self._gate.exclusive()

    def close(self):
        """Dispose pooled connections; the next session reopens the database file"""
        with self._lock:
            if self.engine:
                self.engine.dispose()
                logger.info("Database connections closed")
            self.engine = None
            self.SessionLocal = None
            self._initialized = False


# Create global database manager instance
db_manager = DatabaseManager()


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency to get database session.

    Usage in FastAPI:
        @router.get("/students")
        def list_students(db: Session = Depends(get_db)):
            return db.query(Student).all()
    """
    yield from db_manager.get_session()


def get_engine() -> Engine:
    """Get SQLAlchemy engine instance"""
    return db_manager.get_engine()


def health_check() -> dict:
    """Get database health status (convenience function)"""
    return db_manager.health_check()


def init_database():
    """Create tables and make sure the settings row exists"""
    # Importing the models registers them on Base.metadata
    from app.models import Base, InstituteSetting

    Base.metadata.create_all(bind=get_engine())

    with db_manager.transaction() as session:
        existing = session.execute(select(InstituteSetting)).scalars().first()
        if existing is None:
            session.add(InstituteSetting(
                institute_name=settings.DEFAULT_INSTITUTE_NAME,
                institute_address=settings.DEFAULT_INSTITUTE_ADDRESS,
                institute_phone="",
                institute_email="",
                receipt_prefix=settings.DEFAULT_RECEIPT_PREFIX,
            ))
            logger.info("Created default institute settings")

    logger.info("Database synchronized successfully")


# Export commonly used items
__all__ = [
    "get_db",
    "get_engine",
    "health_check",
    "init_database",
    "db_manager"
]
