"""Database session management."""
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from contextlib import contextmanager
from typing import Iterator, Optional

from attendance.core.config import settings

SessionLocal = sessionmaker(autocommit=False, autoflush=False)

_engine: Optional[Engine] = None


def create_db_engine(database_url: str) -> Engine:
    """Create an engine; pool sizing only applies to server databases."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=False,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        database_url,
        pool_pre_ping=True,
        echo=False,
        pool_size=settings.DB_POOL_SIZE,        # Configurable via DB_POOL_SIZE env var
        max_overflow=settings.DB_MAX_OVERFLOW    # Configurable via DB_MAX_OVERFLOW env var
    )


def get_engine() -> Engine:
    """Return the process-wide engine, creating it from settings on first use."""
    global _engine
    if _engine is None:
        _engine = create_db_engine(settings.DATABASE_URL)
        SessionLocal.configure(bind=_engine)
    return _engine


def init_db(engine: Optional[Engine] = None) -> None:
    """Create all tables that do not exist yet."""
    from attendance.db.base import Base

    Base.metadata.create_all(bind=engine or get_engine())


@contextmanager
def get_db_context() -> Iterator[Session]:
    """Context manager for getting a database session outside of a request."""
    get_engine()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
