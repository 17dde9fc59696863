"""Database package."""
from attendance.db.session import SessionLocal, get_engine, get_db_context, init_db
from attendance.db.base import Base

__all__ = ["SessionLocal", "get_engine", "get_db_context", "init_db", "Base"]
