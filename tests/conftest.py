import os

# Settings are read once at import time; keep tests off real services
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"

import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.database import Base, get_db
from app.utils.cache import product_cache


# Create test database (SQLite in-memory for testing)
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    """Override database dependency for testing."""
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


# Override the dependency
app.dependency_overrides[get_db] = override_get_db


class FakeRedis:
    """Dict-backed stand-in for the handful of Redis calls the cache makes."""

    def __init__(self):
        self.store = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value

    def delete(self, *keys):
        return sum(1 for key in keys if self.store.pop(key, None) is not None)

    def ping(self):
        return True


@pytest.fixture(autouse=True)
def fake_cache(monkeypatch):
    """Give every test an empty in-process cache."""
    fake = FakeRedis()
    monkeypatch.setattr(product_cache, "client", fake)
    return fake


@pytest.fixture(autouse=True)
def low_stock_alerts():
    """Capture low-stock alerts instead of sending them to the broker."""
    with patch("app.api.products.notify_low_stock.delay") as mocked:
        yield mocked


@pytest.fixture
def session_factory():
    """Session factory bound to the test database."""
    return TestingSessionLocal


@pytest.fixture(scope="function")
def client():
    """Create test client with fresh database for each test."""
    Base.metadata.create_all(bind=engine)

    with TestClient(app) as test_client:
        yield test_client

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def auth_client(client):
    """Test client holding a valid session cookie."""
    client.post(
        "/api/v1/auth/register",
        json={"name": "Test User", "email": "tester@stockly.io", "password": "secret123"}
    )
    response = client.post(
        "/api/v1/auth/login",
        json={"email": "tester@stockly.io", "password": "secret123"}
    )
    assert response.status_code == 200
    return client


@pytest.fixture(scope="function")
def db_session():
    """Create database session for direct database access in tests."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)
