# server/tests/conftest.py
# Set environment variables BEFORE any imports that read them
import os
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-jwt-secret-for-testing-only"

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from askbudi.auth import create_jwt, hash_password
from askbudi.crypto import hash_api_key
from askbudi.database import Database
from askbudi.models import User, UsageLog
from askbudi.profiles import get_or_create_profile
from askbudi.timeutil import utcnow


@pytest.fixture
def database(tmp_path):
    """A fresh SQLite store per test."""
    database = Database(f"sqlite:///{tmp_path / 'askbudi.db'}")
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def app(database):
    from askbudi.main import create_app
    app = create_app(database)
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    # Unhandled errors should come back as 500 responses, not raise in the test
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def make_user(db):
    def _make_user(email="user@example.com", password="password123", plan="free", monthly_quota=None):
        user = User(
            id=f"usr_{email.split('@')[0]}",
            email=email,
            password_hash=hash_password(password),
            created_at=utcnow(),
        )
        db.add(user)
        db.commit()

        profile = get_or_create_profile(db, user.id)
        profile.plan_type = plan
        if monthly_quota is not None:
            profile.monthly_quota = monthly_quota
        db.commit()
        return user
    return _make_user


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def auth_headers(user):
    return {"Authorization": f"Bearer {create_jwt(user.id)}"}


@pytest.fixture
def add_usage(db):
    """Insert ``count`` ledger entries for a key directly."""
    def _add_usage(
        user_id: str,
        secret: str,
        count: int = 1,
        *,
        created_at: datetime = None,
        endpoint: str = "/v1/libraries/search",
        library: str = None,
        status_code: int = 200,
        latency_ms: int = 50,
    ):
        created_at = created_at or utcnow() - timedelta(minutes=1)
        for _ in range(count):
            db.add(UsageLog(
                user_id=user_id,
                api_key_hash=hash_api_key(secret),
                endpoint=endpoint,
                request_data={},
                library=library,
                tokens_used=1,
                response_time_ms=latency_ms,
                status_code=status_code,
                created_at=created_at,
            ))
        db.commit()
    return _add_usage


@pytest.fixture
def make_key(db):
    """Issue a key through the store; returns ``(ApiKey, secret)``."""
    from askbudi.keys import create_api_key

    def _make_key(user_id: str, name: str = None):
        return create_api_key(db, user_id, name=name)
    return _make_key
