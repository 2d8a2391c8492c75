# tests/conftest.py

import os

# Must be set before the application modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["APP_ENV"] = "test"
os.environ["API_PREFIX"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import user_service
from app.db import get_db
from app.models import Base
from auth.jwt_handler import create_access_token
from main import app


@pytest.fixture()
def engine():
    """A fresh in-memory database per test, shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def client(session_factory):
    """TestClient whose requests use the per-test database."""
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


@pytest.fixture()
def admin(db):
    return user_service.create_user(db, "admin", "admin@example.com", "admin123", is_admin=True)


@pytest.fixture()
def alice(db):
    return user_service.create_user(db, "alice", "alice@example.com", "alice-pw")


@pytest.fixture()
def bob(db):
    return user_service.create_user(db, "bob", "bob@example.com", "bob-pw")


@pytest.fixture()
def auth_headers():
    """Build bearer headers for a user."""
    def build(user) -> dict:
        token = create_access_token({"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}
    return build
