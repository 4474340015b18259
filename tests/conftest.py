"""Pytest configuration and fixtures."""

import itertools
import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.config import get_settings
from src.database import Base, get_db, init_db
from src.main import app
from src.services.auth import create_user
from src.services.exceptions import PushDeliveryError
from src.services.notification_service import NotificationService
from src.services.push_client import get_push_client


class AuthHeaders(dict):
    """Dict subclass that also stores user_id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


class FakePushClient:
    """Records every batch instead of calling Expo."""

    def __init__(self):
        self.calls: list[list[dict]] = []
        self.tickets: list[dict] | None = None
        self.error: Exception | None = None

    def send(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        if self.tickets is not None:
            return self.tickets
        return [{"status": "ok", "id": f"ticket-{i}"} for i in range(len(messages))]

    def fail_with(self, message: str = "Expo push API error: 503 Service Unavailable"):
        self.error = PushDeliveryError(message)

    @property
    def sent_messages(self) -> list[dict]:
        return [message for batch in self.calls for message in batch]


# Use test database - PostgreSQL in Docker, SQLite locally
if os.getenv("DATABASE_URL"):
    # Running in Docker - use PostgreSQL test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").replace(
        "/productivity", "/productivity_test"
    )
else:
    # Running locally - use SQLite
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        # For PostgreSQL, create the test database
        from sqlalchemy_utils import create_database, database_exists

        # Create test database if it doesn't exist
        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    init_db(bind=engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def push_client():
    """Fake push sink shared by the service and the API under test."""
    return FakePushClient()


@pytest.fixture(scope="function")
def client(db, push_client):
    """Create a test client with database and push client overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_push_client] = lambda: push_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def notification_service(db, push_client):
    """Notification service wired to the fake push client."""
    return NotificationService(db, push_client=push_client, settings=get_settings())


@pytest.fixture
def make_user(db):
    """Factory for users created directly in the database."""
    counter = itertools.count(1)

    def _make_user(name: str | None = None):
        n = next(counter)
        return create_user(db, f"user{n}@example.com", "testpass123", name or f"User {n}")

    return _make_user


@pytest.fixture
def user(make_user):
    """A single user with no stored notification settings."""
    return make_user("Test User")


@pytest.fixture
def auth_headers(client):
    """Create a user and return auth headers with user info."""
    # Register user
    response = client.post(
        "/api/v1/auth/register",
        json={"email": "test@example.com", "password": "testpass123", "name": "Test User"},
    )
    assert response.status_code == 201
    data = response.json()
    token = data["access_token"]
    user_id = data["user"]["id"]

    return AuthHeaders(
        {"Authorization": f"Bearer {token}"}, user_id=user_id, email="test@example.com"
    )
