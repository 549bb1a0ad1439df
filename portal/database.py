# Hippies Portal - Database Setup
# SQLAlchemy engine, session factory, and FastAPI dependencies

from typing import Callable, Generator, Optional
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool

from portal.config import get_settings
from portal.models.base import Base


# Get settings
settings = get_settings()


def _engine_options() -> dict:
    """Pool and driver options for the configured backend."""
    if settings.is_sqlite:
        # SQLite connections are shared across FastAPI's threadpool
        return {
            "connect_args": {"check_same_thread": False},
            "echo": settings.debug,
        }
    return {
        "poolclass": QueuePool,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": settings.db_pool_timeout,
        "pool_recycle": settings.db_pool_recycle,
        "pool_pre_ping": True,  # Verify connections before using
        "echo": settings.debug,  # Log SQL in debug mode
    }


# Create engine with connection pooling
engine = create_engine(settings.database_url, **_engine_options())


# Session factory
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,  # Prevent lazy-load issues after commit
)


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that provides a database session.

    Usage in route handlers:

        @router.get("/api/tasks")
        def list_tasks(db: Session = Depends(get_db)):
            return db.execute(select(Task)).scalars().all()

    The session is automatically closed after the request completes,
    even if an exception occurs.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_context(session_factory: Optional[Callable[[], Session]] = None) -> Generator[Session, None, None]:
    """
    Context manager for database sessions outside of FastAPI requests.

    Usage in scripts, CLI commands, or the realtime socket loop:

        with get_db_context() as db:
            employee = db.get(Employee, 1)
    """
    db = (session_factory or SessionLocal)()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """
    Initialize the database schema.

    WARNING: This is for development/testing only.
    In production, use Alembic migrations.
    """
    import portal.models  # noqa: F401  (registers every table)
    Base.metadata.create_all(bind=engine)


def drop_db() -> None:
    """
    Drop all tables.

    WARNING: Destroys all data. Only for development/testing.
    """
    Base.metadata.drop_all(bind=engine)


def check_connection() -> bool:
    """
    Test the database connection.

    Returns True if connection succeeds, raises exception otherwise.
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return True


def install_connection_options(target_engine) -> None:
    """Register per-connection options for the engine's dialect."""

    @event.listens_for(target_engine, "connect")
    def set_connection_options(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        if target_engine.dialect.name == "sqlite":
            # Cascades on payroll items and task children rely on this
            cursor.execute("PRAGMA foreign_keys=ON")
        elif target_engine.dialect.name == "mssql":
            cursor.execute("SET DATEFORMAT ymd")
        cursor.close()


install_connection_options(engine)
