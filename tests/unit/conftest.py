"""Shared unit test fixtures."""
from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from attendance.core.security import CheckInTokenCodec, generate_token_key
from attendance.db import init_db
from attendance.repositories import AttendanceRepository, SessionRepository
from attendance.services.checkin import CheckInOrchestrator
from tests.utils import FrozenClock


# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def engine():
    """A fresh in-memory database with all tables for each test."""
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    """Create a fresh database session for each test."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    """Sunday 2025-01-05 09:45, a quarter of an hour before the default service starts."""
    return FrozenClock(datetime(2025, 1, 5, 9, 45))


@pytest.fixture
def token_key():
    return generate_token_key()


@pytest.fixture
def codec(token_key, clock):
    return CheckInTokenCodec([token_key], clock=clock)


@pytest.fixture
def session_repository(db_session):
    return SessionRepository(db_session)


@pytest.fixture
def attendance_repository(db_session):
    return AttendanceRepository(db_session)


@pytest.fixture
def orchestrator(session_repository, attendance_repository, codec, clock):
    return CheckInOrchestrator(session_repository, attendance_repository, codec, clock=clock)
