"""
Shared fixtures.

Every test gets its own SQLite file under tmp_path; the app's session
dependency is pointed at it, so nothing touches the configured database.
"""

import os
import tempfile

os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ.setdefault("JWT_ALGORITHM", "HS256")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ["DATABASE_URL"] = "sqlite:///" + os.path.join(tempfile.gettempdir(), "finance-tracker-tests.db")

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from finance_tracker.database import build_engine, get_session, init_db
from finance_tracker.main import app
from finance_tracker.models.common import utcnow


@pytest.fixture
def engine(tmp_path):
    test_engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    init_db(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def client(engine):
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(client):
    """Register a user and return (auth headers, user payload)."""

    def _make(email="alice@example.com", password="secret123", name="Alice"):
        resp = client.post(
            "/auth/register",
            json={"name": name, "email": email, "password": password},
        )
        assert resp.status_code == 201, resp.text
        body = resp.json()
        return {"Authorization": f"Bearer {body['access_token']}"}, body["user"]

    return _make


@pytest.fixture
def auth(make_user):
    headers, _ = make_user()
    return headers


@pytest.fixture
def other_auth(make_user):
    headers, _ = make_user(email="bob@example.com", name="Bob")
    return headers


def future(days=30) -> str:
    return (utcnow() + timedelta(days=days)).replace(microsecond=0).isoformat()


def past(days=30) -> str:
    return (utcnow() - timedelta(days=days)).replace(microsecond=0).isoformat()
