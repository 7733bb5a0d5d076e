"""Pytest fixtures shared by the unit, integration and security suites.

Provides:
- An in-memory SQLite database, created and dropped around each test
- Users in every role/status combination the workflows need
- Authenticated TestClients per user
- A tmp-path blob store and a controllable clock

Usage:
    def test_list(client_for, alice):
        response = client_for(alice).get("/documents")
        assert response.status_code == 200
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Generator

# Set environment variables BEFORE any xdocs import so settings pick them up
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required-for-security")
os.environ.setdefault("LOG_JSON", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from xdocs.auth.jwt import create_access_token
from xdocs.auth.password import hash_password
from xdocs.config import get_settings
from xdocs.database import get_db
from xdocs.dependencies import get_blob_store, get_clock
from xdocs.models import Base, User
from xdocs.storage.blob_store import LocalBlobStore

# One shared connection so every session sees the same in-memory database
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

PASSWORD = "S3cret-pass"


class FrozenClock:
    """Callable clock whose time only moves when a test says so."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Fresh schema per test."""
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime.now(timezone.utc).replace(microsecond=0))


@pytest.fixture
def blob_store(tmp_path) -> LocalBlobStore:
    store = LocalBlobStore(tmp_path / "documents")
    store.ensure_root()
    return store


@pytest.fixture
def app(db_session: Session, blob_store: LocalBlobStore, clock: FrozenClock):
    """The application with database, storage and clock overridden."""
    from xdocs.main import app as application

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_blob_store] = lambda: blob_store
    application.dependency_overrides[get_clock] = lambda: clock

    yield application

    application.dependency_overrides.clear()


@pytest.fixture
def client(app) -> TestClient:
    """Unauthenticated client, for public endpoints and the login flow."""
    return TestClient(app)


@pytest.fixture
def make_user(db_session: Session):
    """Factory creating a user row directly in the database."""

    def _make_user(username: str, role: str = "user", status: str = "active",
                   email=None, note: str = "") -> User:
        user = User(
            username=username,
            email=email,
            role=role,
            status=status,
            note=note,
            password_hash=hash_password(PASSWORD),
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def admin(make_user) -> User:
    return make_user("root", role="admin", email="root@example.com")


@pytest.fixture
def alice(make_user) -> User:
    return make_user("alice", email="alice@example.com")


@pytest.fixture
def bob(make_user) -> User:
    return make_user("bob", email="bob@example.com")


@pytest.fixture
def carol(make_user) -> User:
    return make_user("carol")


def auth_headers(user: User) -> dict:
    token = create_access_token(user.id, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client_for(app):
    """Factory returning a TestClient that sends the user's bearer token."""

    def _client_for(user: User) -> TestClient:
        test_client = TestClient(app)
        test_client.headers.update(auth_headers(user))
        return test_client

    return _client_for


@pytest.fixture
def ttl_hours(app):
    """Override the approval TTL for one test: ttl_hours(1)."""

    def _set(hours: int) -> None:
        settings = get_settings().model_copy(update={"DOWNLOAD_APPROVAL_TTL_HOURS": hours})
        app.dependency_overrides[get_settings] = lambda: settings

    return _set


@pytest.fixture
def upload():
    """Upload helper: upload(client, "a.txt", b"...", permission="public")."""

    def _upload(test_client: TestClient, filename: str, content: bytes,
                permission: str = "public", allowed_users=None,
                mime_type: str = "text/plain", **fields):
        data = {"permission": permission, **fields}
        if allowed_users is not None:
            data["allowed_users"] = ",".join(str(u) for u in allowed_users)
        return test_client.post(
            "/documents",
            files={"file": (filename, content, mime_type)},
            data=data,
        )

    return _upload
