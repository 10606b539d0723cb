# SPDX-FileCopyrightText: 2025 Roland Knall <rknall@gmail.com>
# SPDX-License-Identifier: GPL-2.0-only
import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Set test environment before importing app
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-32chars!"  # nosec - test-only secret  # noqa: S105
os.environ["DATABASE_URL"] = "sqlite:///./test.db"
os.environ["SEED_RBAC_ON_STARTUP"] = "false"

from src.database import get_db
from src.main import app
from src.models import User
from src.models.base import Base
from src.rbac import context
from src.rbac.roles import ADMIN_ROLE, INSTRUCTOR_ROLE, STUDENT_ROLE
from src.security import get_password_hash
from src.services import rbac_service
from src.services.rbac_seed_service import seed_rbac_data

# Test database setup
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_PASSWORD = "password123"  # noqa: S105


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_decision_context():
    """Every test starts and ends without an authorization decision."""
    context.clear()
    yield
    context.clear()


@pytest.fixture(scope="function")
def client(db_session):
    """Create a test client with database override."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seeded_db(db_session):
    """Database with the default catalog, roles, guard rules and grants."""
    seed_rbac_data(db_session)
    return db_session


def create_user(db_session, username: str, role_name: str | None = None) -> User:
    """Helper to create a persisted user, optionally holding a role."""
    user = User(
        username=username,
        email=f"{username}@example.com",
        hashed_password=get_password_hash(TEST_PASSWORD),
        is_active=True,
    )
    db_session.add(user)
    db_session.commit()
    if role_name:
        role = rbac_service.get_role_by_name(db_session, role_name)
        rbac_service.assign_role_to_user(db_session, user_id=user.id, role_id=role.id)
    db_session.refresh(user)
    return user


@pytest.fixture
def make_user(db_session):
    """Factory fixture wrapping create_user for the current session."""

    def _make(username: str, role_name: str | None = None) -> User:
        return create_user(db_session, username, role_name)

    return _make


@pytest.fixture
def admin_user(seeded_db) -> User:
    return create_user(seeded_db, "admin", ADMIN_ROLE)


@pytest.fixture
def instructor_user(seeded_db) -> User:
    return create_user(seeded_db, "instructor", INSTRUCTOR_ROLE)


@pytest.fixture
def student_user(seeded_db) -> User:
    return create_user(seeded_db, "student", STUDENT_ROLE)


def login(client, username: str) -> TestClient:
    response = client.post(
        "/api/v1/auth/login", json={"username": username, "password": TEST_PASSWORD}
    )
    assert response.status_code == 200
    return client


@pytest.fixture
def admin_client(client, admin_user):
    """Create an authenticated admin test client."""
    return login(client, admin_user.username)


@pytest.fixture
def instructor_client(client, instructor_user):
    return login(client, instructor_user.username)


@pytest.fixture
def student_client(client, student_user):
    return login(client, student_user.username)
