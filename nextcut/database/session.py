"""
Database Session Management
============================

Handles database connections, session lifecycle and atomic units of work.
"""

import os
import threading
from contextlib import contextmanager, nullcontext
from typing import Callable, Generator, Optional, TypeVar

import structlog
from sqlalchemy import create_engine, event
from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from nextcut.config import settings
from nextcut.core.exceptions import (
    AlreadyExistsError,
    ConflictError,
    QueueError,
    UnavailableError,
)

log = structlog.get_logger()

T = TypeVar("T")

# SQLSTATEs for serialization failure and deadlock
_CONFLICT_SQLSTATES = {"40001", "40P01"}
_CONFLICT_MARKERS = ("database is locked", "could not serialize", "deadlock")

# Unique violations that a retry can never clear, as SQLite and Postgres name them
_DUPLICATE_MARKERS = {
    "barbers.username": "username",
    "uq_barbers_username": "username",
    "customers.phone_number": "phone_number",
    "uq_customers_phone_number": "phone_number",
}

# In-memory SQLite runs every session on one shared connection
_shared_connection_lock = threading.RLock()


def create_db_engine(database_url: Optional[str] = None, echo: Optional[bool] = None):
    """
    Create and configure the database engine.

    In-memory SQLite URLs get a single connection shared by every thread
    (StaticPool). Two transactions cannot be open on it at once, so
    ``run_atomic`` runs units against such an engine one at a time. Plain
    sessions from ``get_db_context`` or ``get_db`` are not serialized; use a
    file or server URL when several threads write outside ``run_atomic``.
    """
    database_url = database_url or settings.database_url
    echo = settings.app_debug if echo is None else echo

    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    in_memory = ":memory:" in database_url or database_url.rstrip("/") == "sqlite:"

    # Ensure data directory exists
    if ":///" in database_url and not in_memory:
        db_dir = os.path.dirname(database_url.split(":///")[1])
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir, exist_ok=True)

    connect_args = {
        "check_same_thread": False,
        "timeout": settings.db_busy_timeout_seconds,
    }
    if in_memory:
        engine = create_engine(database_url, connect_args=connect_args,
                               poolclass=StaticPool, echo=echo)
    else:
        engine = create_engine(database_url, connect_args=connect_args, echo=echo)

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        # Take over transaction control from pysqlite so BEGIN IMMEDIATE sticks
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        if not in_memory:
            cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    @event.listens_for(engine, "begin")
    def begin_immediate(conn):
        # Writers serialize on the database lock from the first statement
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def uses_shared_connection(bind) -> bool:
    """True for engines where every session runs on the same connection."""
    return bind.dialect.name == "sqlite" and isinstance(bind.pool, StaticPool)


# Create global engine and session factory
engine = create_db_engine()
SessionLocal = sessionmaker(autoflush=False, bind=engine)


@contextmanager
def get_db_context(session_factory: Optional[sessionmaker] = None) -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Commits on success, rolls back on any exception.

    Usage:
        with get_db_context() as db:
            db.add(barber)
    """
    db = (session_factory or SessionLocal)()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_db() -> Generator[Session, None, None]:
    """
    Session generator for framework dependency injection.

    The caller owns the transaction; the session is only closed here.

    Usage:
        @app.get("/barbers/{barber_id}/queue")
        def queue(barber_id: int, db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def translate_store_error(exc: SQLAlchemyError) -> QueueError:
    """Map a SQLAlchemy failure onto the queue error taxonomy."""
    if isinstance(exc, IntegrityError):
        text = str(exc.orig)
        for marker, field in _DUPLICATE_MARKERS.items():
            if marker in text:
                return AlreadyExistsError(f"{field} is already registered", {"field": field})
        return ConflictError("Conflicting concurrent change, retry the operation",
                             {"reason": "integrity"})
    if isinstance(exc, PoolTimeoutError):
        return UnavailableError("Timed out waiting for a database connection")
    if isinstance(exc, DBAPIError):
        if exc.connection_invalidated:
            return UnavailableError("Database connection lost")
        pgcode = getattr(exc.orig, "pgcode", None)
        text = str(exc.orig).lower()
        if pgcode in _CONFLICT_SQLSTATES or any(m in text for m in _CONFLICT_MARKERS):
            return ConflictError("Transaction could not commit atomically, retry the operation",
                                 {"reason": "serialization"})
        if isinstance(exc, OperationalError):
            return UnavailableError("Database unavailable")
    return UnavailableError(f"Database error: {exc.__class__.__name__}")


def run_atomic(work: Callable[[Session], T],
               session_factory: Optional[sessionmaker] = None) -> T:
    """
    Run ``work(session)`` as one all-or-nothing transaction.

    Commits when ``work`` returns, rolls back on any exception. Store failures
    surface as AlreadyExistsError, ConflictError or UnavailableError;
    QueueErrors raised by ``work`` propagate unchanged. Nothing is retried here.
    """
    db = (session_factory or SessionLocal)()
    guard = _shared_connection_lock if uses_shared_connection(db.get_bind()) else nullcontext()
    with guard:
        try:
            result = work(db)
            db.commit()
            return result
        except QueueError:
            db.rollback()
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            error = translate_store_error(exc)
            if isinstance(error, ConflictError):
                log.warning("transaction_conflict", error=exc.__class__.__name__)
            elif isinstance(error, UnavailableError):
                log.warning("store_unavailable", error=exc.__class__.__name__)
            raise error from exc
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()


def create_all_tables(engine_instance=None):
    """Create all tables in the database."""
    from nextcut.models import Base

    if engine_instance is None:
        engine_instance = engine

    Base.metadata.create_all(bind=engine_instance)


def drop_all_tables(engine_instance=None):
    """Drop all tables in the database."""
    from nextcut.models import Base

    if engine_instance is None:
        engine_instance = engine

    Base.metadata.drop_all(bind=engine_instance)
