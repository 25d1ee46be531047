"""Pytest fixtures for the ORGanizer API.

Provides reusable test fixtures for:
- Database session on an in-memory SQLite engine (tables created per test)
- Users and an organization with an owner
- Test clients authenticated with a Bearer session token

Usage:
    def test_list_employees(owner_client):
        response = owner_client.get("/api/v1/payroll/employees")
        assert response.status_code == 200
"""

import os
import sys
from pathlib import Path

# Set environment variables BEFORE any imports to ensure they take effect
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = ""
os.environ["MAIL_BACKEND"] = "memory"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["LOG_JSON"] = "false"
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-256-bits-minimum-length-required-for-security")
os.environ.setdefault("SECRET_PEPPER", "test-pepper-secret-key-32-chars-long")
os.environ.pop("APP_URL", None)

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from typing import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from organizer.auth.jwt import create_access_token
from organizer.database import SessionLocal, engine, get_db
from organizer.models import Base, Org, User
from organizer.notifications import mailer
from organizer.tenancy.service import create_organization


@pytest.fixture(scope="function", autouse=True)
def clear_outbox():
    """Each test starts with an empty memory mail outbox."""
    mailer.outbox.clear()
    yield
    mailer.outbox.clear()


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database session for each test.

    Creates all tables before the test and drops them after.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def make_user(db_session: Session) -> Callable[[str], User]:
    """Factory creating committed users by email."""

    def _make_user(email: str) -> User:
        user = User(email=email)
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture(scope="function")
def owner(make_user) -> User:
    return make_user("owner@example.com")


@pytest.fixture(scope="function")
def test_org(db_session: Session, owner: User) -> Org:
    """Organization owned by the owner fixture (also their active org)."""
    org = create_organization(db_session, owner, "Acme HQ")
    db_session.commit()
    db_session.refresh(org)
    return org


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create an unauthenticated test client.

    Useful for testing public endpoints and the login flow.
    """
    from organizer.main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client_for(db_session: Session) -> Generator[Callable[[User], TestClient], None, None]:
    """Factory returning a test client authenticated as the given user.

    Each call creates its own client, so cookies never leak between users.
    """
    from organizer.main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    def _client_for(user: User) -> TestClient:
        authed = TestClient(app)
        authed.headers.update({"Authorization": f"Bearer {create_access_token(user.id, user.email)}"})
        return authed

    yield _client_for

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def owner_client(client_for, owner: User, test_org: Org) -> TestClient:
    """Test client authenticated as the owner of test_org."""
    return client_for(owner)


@pytest.fixture(scope="function")
def add_member(db_session: Session):
    """Add a user to an organization in the current membership schema."""
    from organizer.models import OrgMember

    def _add_member(org: Org, user: User, role: str = "member") -> OrgMember:
        member = OrgMember(org_id=org.id, user_id=user.id, role=role)
        db_session.add(member)
        db_session.commit()
        return member

    return _add_member
