import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_JSON", "false")

import pytest
from datetime import datetime, timedelta, UTC
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from jose import jwt

from expense_api.database import get_db
from expense_api.models.base import Base
from expense_api.config import settings
# Import all model classes to ensure they're registered with SQLAlchemy
from expense_api.models.user import User
from expense_api.models.group import Group
from expense_api.models.group_membership import GroupMembership
from expense_api.models.group_invitation import GroupInvitation
from expense_api.models.expense import Expense
# Import FastAPI app AFTER model imports
from expense_api.main import app

# Test database (SQLite in-memory for speed)
# Use StaticPool to ensure all connections share the same in-memory database
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Fixture users never log in; the hash only has to be non-empty
TEST_PASSWORD_HASH = "!unusable"


@pytest.fixture(scope="function")
def db_session():
    """Create fresh database for each test"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db_session):
    """FastAPI test client with test database"""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def create_test_token(user_id: int | str = 1, expired: bool = False, email: str | None = None) -> str:
    """
    Generate valid JWT token for testing.

    Args:
        user_id: User ID to embed in 'sub' claim
        expired: If True, create expired token
        email: Optional email claim

    Returns:
        Encoded JWT token
    """
    if expired:
        exp = datetime.now(UTC) - timedelta(minutes=5)
    else:
        exp = datetime.now(UTC) + timedelta(minutes=15)

    payload = {"sub": str(user_id), "exp": exp, "iat": datetime.now(UTC)}
    if email:
        payload["email"] = email

    token = jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")
    return token


def headers_for(user: User) -> dict:
    """Authorization headers for an existing user"""
    return {"Authorization": f"Bearer {create_test_token(user.id, email=user.email)}"}


def make_user(db_session, username: str, email: str) -> User:
    user = User(username=username, email=email, password_hash=TEST_PASSWORD_HASH)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def user_a(db_session):
    return make_user(db_session, "alice", "a@x.com")


@pytest.fixture
def user_b(db_session):
    return make_user(db_session, "bob", "b@x.com")


@pytest.fixture
def user_c(db_session):
    return make_user(db_session, "carol", "c@x.com")


@pytest.fixture
def user_a_headers(user_a):
    """Authorization headers for user A"""
    return headers_for(user_a)


@pytest.fixture
def user_b_headers(user_b):
    """Authorization headers for user B"""
    return headers_for(user_b)


@pytest.fixture
def user_c_headers(user_c):
    """Authorization headers for user C"""
    return headers_for(user_c)


@pytest.fixture
def auth_headers(user_a_headers):
    """Authorization headers for the default test user (user A)"""
    return user_a_headers


@pytest.fixture
def shared_group(db_session, user_a, user_b):
    """Group 'Trip' with A (creator) and B as members"""
    group = Group(name="Trip", created_by=user_a.id)
    db_session.add(group)
    db_session.commit()
    db_session.add_all(
        [
            GroupMembership(group_id=group.id, user_id=user_a.id),
            GroupMembership(group_id=group.id, user_id=user_b.id),
        ]
    )
    db_session.commit()
    db_session.refresh(group)
    return group
