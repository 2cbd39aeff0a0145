"""Shared test fixtures: in-memory SQLite sessions and API clients."""
import os

# Must run before sulfurwatch.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ADMIN_IDENTITY"] = "admin"
os.environ.pop("SULFURWATCH_API_KEY", None)

import pytest
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from sulfurwatch.main import app
from sulfurwatch.database import get_db
from sulfurwatch.models import Base  # noqa: F401 -- registers all models
from sulfurwatch.modules.authorization import identity_check

ADMIN = "admin"


def _sqlite_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragmas(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def session_factory():
    engine = _sqlite_engine()
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    """In-memory SQLite session with all tables."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def is_admin():
    return identity_check(ADMIN)


@pytest.fixture
def mock_db():
    """MagicMock database session — returns None for all queries by default."""
    session = MagicMock()
    session.query.return_value.filter.return_value.first.return_value = None
    session.query.return_value.filter.return_value.order_by.return_value.all.return_value = []
    session.query.return_value.order_by.return_value.all.return_value = []
    return session


@pytest.fixture
def api_client(mock_db):
    """TestClient with DB dependency overridden to use a MagicMock session."""
    def override_get_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def sqlite_client(session_factory):
    """TestClient backed by a real in-memory SQLite database."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
