"""
Pytest configuration and fixtures for backend tests.

Provides shared fixtures for:
- Test database sessions
- Settings and shift policies with deterministic timezones
- Sample data factories (events, sign-ups, users)
- FastAPI test client and identity headers
"""

import os
import pytest
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app modules
os.environ['CRISISLINE_DB_URL'] = 'sqlite:///:memory:'
os.environ.setdefault('CRISISLINE_TIMEZONE', 'Europe/Lisbon')

from backend.src.config.settings import AppSettings
from backend.src.models import Base, Event, SignUp, User
from backend.src.services.recurrence import ShiftPolicy


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture(scope='function')
def test_db_engine():
    """Create an in-memory SQLite database engine for testing."""
    from sqlalchemy import event

    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )

    # Enable foreign key constraints for SQLite
    # This must be set for each connection
    def _fk_pragma_on_connect(dbapi_con, con_record):
        dbapi_con.execute('pragma foreign_keys=ON')

    event.listen(engine, 'connect', _fk_pragma_on_connect)

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope='function')
def test_db_session(test_db_engine):
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_settings():
    """Settings with the default shift layout and a small write chunk."""
    return AppSettings(
        CRISISLINE_TIMEZONE='Europe/Lisbon',
        CRISISLINE_SHIFT_WINDOWS='20:00-22:30,22:30-01:00',
        CRISISLINE_BATCH_WRITE_LIMIT=400,
    )


@pytest.fixture
def utc_policy():
    """Default two-shift layout evaluated in UTC, so instants equal clock times."""
    return ShiftPolicy(timezone='UTC')


# ============================================================================
# Sample Data Factories
# ============================================================================

@pytest.fixture
def sample_event(test_db_session):
    """Factory for creating sample Event models in the database."""
    def _create(
        title='Evening shift',
        type='shift',
        start_time=None,
        duration=timedelta(hours=2, minutes=30),
        max_capacity=1,
        status='draft',
        description='',
        supervisor=None,
        published_at=None,
    ):
        start_time = start_time or datetime(2024, 6, 3, 20, 0)
        event = Event(
            title=title,
            type=type,
            description=description,
            start_time=start_time,
            end_time=start_time + duration,
            max_capacity=max_capacity,
            status=status,
            supervisor=supervisor,
            published_at=published_at,
        )
        test_db_session.add(event)
        test_db_session.commit()
        test_db_session.refresh(event)
        return event
    return _create


@pytest.fixture
def sample_sign_up(test_db_session):
    """Factory for adding a user directly to an event's roster."""
    def _create(event, user_uid='uid-volunteer-1'):
        sign_up = SignUp(event_id=event.id, user_uid=user_uid)
        test_db_session.add(sign_up)
        test_db_session.commit()
        test_db_session.refresh(sign_up)
        return sign_up
    return _create


@pytest.fixture
def sample_user(test_db_session):
    """Factory for creating sample User models in the database."""
    def _create(uid='uid-volunteer-1', id_number='1001', name='Ana', role='volunteer'):
        user = User(uid=uid, id_number=id_number, name=name, role=role)
        test_db_session.add(user)
        test_db_session.commit()
        test_db_session.refresh(user)
        return user
    return _create


# ============================================================================
# FastAPI Test Client Fixture
# ============================================================================

@pytest.fixture
def test_client(test_db_session):
    """Create a test client for FastAPI application."""
    from fastapi.testclient import TestClient
    from backend.src.main import app
    from backend.src.db.database import get_db

    def get_test_db():
        try:
            yield test_db_session
        finally:
            pass

    app.dependency_overrides[get_db] = get_test_db

    with TestClient(app) as client:
        yield client

    # Clear overrides
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build identity headers as injected by the gateway."""
    def _headers(role='volunteer', uid=None):
        return {
            'X-User-Uid': uid or f'uid-{role}-1',
            'X-User-Role': role,
        }
    return _headers
