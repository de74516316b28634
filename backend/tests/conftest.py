"""
Pytest configuration and fixtures for backend tests.

Provides shared fixtures for:
- Test database sessions (in-memory and file-backed SQLite)
- A pinned clock
- Sample data factories (organisations, users, staff, clients)
- FastAPI test client with dependency overrides
"""

import os
from datetime import datetime

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app modules
os.environ['CARELEDGER_DB_URL'] = 'sqlite:///:memory:'
os.environ.setdefault('CARELEDGER_ENV', 'test')
os.environ.setdefault('CARELEDGER_LOG_LEVEL', 'WARNING')

from backend.src.config.settings import AppSettings
from backend.src.models import (
    Base,
    Organisation,
    ServiceUser,
    StaffMember,
    User,
    UserRole,
)
from backend.src.utils.clock import fixed_clock


# Monday morning, when the scheduled run normally fires
FROZEN_NOW = datetime(2026, 3, 2, 6, 0, 0)


def _fk_pragma_on_connect(dbapi_con, con_record):
    dbapi_con.execute('pragma foreign_keys=ON')


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture(scope='function')
def test_db_engine():
    """Create an in-memory SQLite database engine for testing."""
    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )

    # Enable foreign key constraints for SQLite (per connection)
    event.listen(engine, 'connect', _fk_pragma_on_connect)

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope='function')
def test_session_factory(test_db_engine):
    """Session factory bound to the in-memory test engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=test_db_engine)


@pytest.fixture(scope='function')
def test_db_session(test_session_factory):
    """Create a test database session."""
    session = test_session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture(scope='function')
def file_db_engine(tmp_path):
    """
    File-backed SQLite engine for tests that run rules in parallel threads.

    Each thread gets its own connection; the busy timeout lets concurrent
    writers queue instead of failing.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'careledger.db'}",
        connect_args={'check_same_thread': False, 'timeout': 30},
    )
    event.listen(engine, 'connect', _fk_pragma_on_connect)

    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope='function')
def file_session_factory(file_db_engine):
    """Session factory bound to the file-backed engine."""
    return sessionmaker(autocommit=False, autoflush=False, bind=file_db_engine)


@pytest.fixture(scope='function')
def file_db_session(file_session_factory):
    """Session on the file-backed database, used to seed data."""
    session = file_session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# ============================================================================
# Clock and Settings Fixtures
# ============================================================================

@pytest.fixture
def frozen_now():
    """The pinned 'now' shared by every time-dependent test."""
    return FROZEN_NOW


@pytest.fixture
def clock(frozen_now):
    """Clock that always returns frozen_now."""
    return fixed_clock(frozen_now)


@pytest.fixture
def settings():
    """Default compliance windows, independent of the developer's environment."""
    return AppSettings(
        CRON_SECRET="",
        CARELEDGER_EXPIRY_WARNING_DAYS=90,
        CARELEDGER_PERSONAL_PLAN_GRACE_DAYS=28,
        CARELEDGER_REVIEW_INTERVAL_MONTHS=12,
        CARELEDGER_STALE_INCIDENT_DAYS=14,
        CARELEDGER_DEDUP_WINDOW_HOURS=24,
    )


# ============================================================================
# Sample Data Factories
# ============================================================================

def _organisation_factory(session):
    _counter = [0]

    def _create(name=None, is_active=True):
        _counter[0] += 1
        organisation = Organisation(
            name=name or f"Care Provider {_counter[0]}",
            is_active=is_active,
        )
        session.add(organisation)
        session.commit()
        session.refresh(organisation)
        return organisation
    return _create


def _user_factory(session):
    _counter = [0]

    def _create(
        organisation,
        role=UserRole.MANAGER,
        is_active=True,
        email=None,
        first_name="Morag",
        last_name="Campbell",
    ):
        _counter[0] += 1
        user = User(
            organisation_id=organisation.id,
            email=email or f"user{_counter[0]}@{organisation.id}.example.com",
            first_name=first_name,
            last_name=last_name,
            role=role,
            is_active=is_active,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
    return _create


def _staff_factory(session):
    def _create(organisation, first_name="Jane", last_name="Smith", status="active"):
        staff = StaffMember(
            organisation_id=organisation.id,
            first_name=first_name,
            last_name=last_name,
            status=status,
        )
        session.add(staff)
        session.commit()
        session.refresh(staff)
        return staff
    return _create


def _service_user_factory(session):
    def _create(organisation, first_name="Agnes", last_name="Fraser", status="active"):
        client = ServiceUser(
            organisation_id=organisation.id,
            first_name=first_name,
            last_name=last_name,
            status=status,
        )
        session.add(client)
        session.commit()
        session.refresh(client)
        return client
    return _create


@pytest.fixture
def make_organisation(test_db_session):
    """Factory for creating Organisation models in the database."""
    return _organisation_factory(test_db_session)


@pytest.fixture
def make_user(test_db_session):
    """Factory for creating User models in the database."""
    return _user_factory(test_db_session)


@pytest.fixture
def make_staff(test_db_session):
    """Factory for creating StaffMember models in the database."""
    return _staff_factory(test_db_session)


@pytest.fixture
def make_service_user(test_db_session):
    """Factory for creating ServiceUser models in the database."""
    return _service_user_factory(test_db_session)


@pytest.fixture
def test_organisation(make_organisation):
    """Active organisation used by most tests."""
    return make_organisation(name="Glenview Care")


@pytest.fixture
def test_manager(make_user, test_organisation):
    """Manager of test_organisation; receives compliance alerts."""
    return make_user(test_organisation, role=UserRole.MANAGER)


@pytest.fixture
def file_factories(file_db_session):
    """The same factories, bound to the file-backed database."""
    return {
        "organisation": _organisation_factory(file_db_session),
        "user": _user_factory(file_db_session),
        "staff": _staff_factory(file_db_session),
        "service_user": _service_user_factory(file_db_session),
    }


# ============================================================================
# FastAPI Test Client Fixture
# ============================================================================

@pytest.fixture
def test_client(test_db_session, test_session_factory):
    """
    Create a test client for the FastAPI application.

    Rate limiting is switched off. Requests are unauthenticated until a
    test calls the ``authenticate`` fixture.
    """
    from fastapi.testclient import TestClient
    from backend.src.db.database import get_db, get_session_factory
    from backend.src.main import app
    from backend.src.utils.rate_limit import limiter

    def get_test_db():
        try:
            yield test_db_session
        finally:
            pass

    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_session_factory] = lambda: test_session_factory

    limiter_was_enabled = limiter.enabled
    limiter.enabled = False

    with TestClient(app) as client:
        yield client

    limiter.enabled = limiter_was_enabled
    app.dependency_overrides.clear()


@pytest.fixture
def authenticate():
    """
    Authenticate subsequent test_client requests as the given user.

    Replaces the session lookup with a TenantContext built from the user.
    """
    from backend.src.main import app
    from backend.src.middleware.tenant import TenantContext, get_tenant_context

    def _authenticate(user):
        ctx = TenantContext(
            organisation_id=user.organisation.id,
            organisation_guid=user.organisation.guid,
            user_id=user.id,
            user_guid=user.guid,
            user_email=user.email,
            role=user.role,
        )
        app.dependency_overrides[get_tenant_context] = lambda: ctx
        return ctx
    return _authenticate
