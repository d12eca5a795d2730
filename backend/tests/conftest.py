"""Pytest fixtures for the DocVault backend.

Provides reusable test fixtures for:
- In-memory SQLite database session (fresh schema per test)
- Company owners (a user plus the company they own)
- A local content store rooted in pytest's tmp_path
- A controllable fake scan service
- A TestClient wired to all of the above through dependency_overrides

Usage:
    def test_list(client, owner, auth_headers):
        response = client.get("/api/v1/documents", headers=auth_headers(owner.user))
        assert response.status_code == 200
"""

import sys
import os
from pathlib import Path

# Set environment variables BEFORE any imports to ensure they take effect
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required-for-security")
os.environ.setdefault("LOG_JSON", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from dataclasses import dataclass
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from typing import Callable, Dict, Generator

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from config import Settings, get_settings
from database import get_db
from models.base import Base
from models.company import Company
from models.user import User
from auth.jwt import create_access_token
from dependencies import get_document_store, get_scan_service
from infrastructure.storage.local_storage_adapter import LocalStorageAdapter
from fixtures.documents import TEST_MAX_FILE_SIZE, TEST_MAX_FILES, FakeScanService

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(test_engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@dataclass
class CompanyOwner:
    user: User
    company: Company


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=test_engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


def _create_owner(db_session: Session, email: str, company_name: str) -> CompanyOwner:
    user = User(email=email, name=email.split("@")[0], status="ACTIVE")
    db_session.add(user)
    db_session.flush()

    company = Company(owner_id=user.id, name=company_name)
    db_session.add(company)
    db_session.commit()
    db_session.refresh(user)
    db_session.refresh(company)
    return CompanyOwner(user=user, company=company)


@pytest.fixture(scope="function")
def owner(db_session: Session) -> CompanyOwner:
    """User owning "Acme GmbH"."""
    return _create_owner(db_session, "owner@acme.test", "Acme GmbH")


@pytest.fixture(scope="function")
def other_owner(db_session: Session) -> CompanyOwner:
    """User owning a second, unrelated company."""
    return _create_owner(db_session, "owner@globex.test", "Globex Corp")


@pytest.fixture(scope="function")
def user_without_company(db_session: Session) -> User:
    user = User(email="lonely@example.test", name="Lonely", status="ACTIVE")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def storage_root(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture(scope="function")
def storage(storage_root: Path) -> LocalStorageAdapter:
    return LocalStorageAdapter(storage_root)


@pytest.fixture(scope="function")
def scan_service() -> FakeScanService:
    return FakeScanService()


@pytest.fixture(scope="function")
def test_settings(storage_root: Path) -> Settings:
    return Settings(
        MAX_UPLOAD_SIZE_BYTES=TEST_MAX_FILE_SIZE,
        MAX_FILES_PER_UPLOAD=TEST_MAX_FILES,
        UPLOAD_DIR=str(storage_root),
    )


@pytest.fixture(scope="function")
def client(
    db_session: Session,
    storage: LocalStorageAdapter,
    scan_service: FakeScanService,
    test_settings: Settings,
) -> Generator[TestClient, None, None]:
    """TestClient with database, content store, scanner and settings overridden."""
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_document_store] = lambda: storage
    app.dependency_overrides[get_scan_service] = lambda: scan_service
    app.dependency_overrides[get_settings] = lambda: test_settings

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    """Build an Authorization header for a user."""

    def _headers(user: User) -> Dict[str, str]:
        token = create_access_token(user_id=user.id, email=user.email)
        return {"Authorization": f"Bearer {token}"}

    return _headers
