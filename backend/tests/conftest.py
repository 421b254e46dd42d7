"""Pytest fixtures, per-test SQLite database for fast, isolated tests."""
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from countdown.config import settings
from countdown.database import Base, get_db
from countdown.main import app
from countdown.services import auth_service

# Import all models so they register with Base.metadata
from countdown.models.user import User    # noqa: F401
from countdown.models.timer import Timer  # noqa: F401

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session bound to the test engine."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def alice(db):
    return create_test_user(db, username="alice", email="alice@example.com")


@pytest.fixture
def bob(db):
    return create_test_user(db, username="bob", email="bob@example.com")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def create_test_user(db, username: str = "Test User", email: str = "test@example.com",
                     password: str = "correct horse") -> User:
    """Helper: register a user through the auth service."""
    return auth_service.sign_up(db, username, email, password)


def auth_headers(user: User) -> dict:
    """Helper: a signed session cookie for ``user``."""
    token = auth_service.sign_session(user.user_id)
    return {"Cookie": f"{settings.SESSION_COOKIE_NAME}={token}"}


def iso_in(**delta) -> str:
    """Helper: ISO-8601 UTC timestamp offset from the real current time."""
    return (datetime.now(timezone.utc) + timedelta(**delta)).isoformat()


def create_test_timer(client: TestClient, user: User, name: str = "Launch", **delta) -> dict:
    """Helper: POST /api/timers as ``user`` and return response JSON."""
    resp = client.post(
        "/api/timers/",
        json={"event_name": name, "event_date": iso_in(**(delta or {"days": 2}))},
        headers=auth_headers(user),
    )
    assert resp.status_code == 201, resp.text
    return resp.json()
