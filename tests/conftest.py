"""
Shared test fixtures.

Sets up an isolated test database so tests never touch
the real database. Tables are created before each test and
dropped after it, so no test data persists.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from fintrack.main import app
from fintrack.models import Base
from fintrack.models.base import get_db
from fintrack.models.enums import Role
from fintrack.schemas.user import UserCreate
from fintrack.security import create_access_token
from fintrack.services.user_service import UserService


# SQLite for tests: no external database needed.
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)

DEFAULT_PASSWORD = "s3cret-pass"


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory():
    """The sessionmaker itself, for tests that need several sessions."""
    return TestSessionLocal


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    The get_db dependency is overridden so the app uses the
    test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """Factory: create and commit a user with the given role."""
    counter = {"n": 0}

    def _make(role=Role.COMPTABLE, email=None, password=DEFAULT_PASSWORD):
        counter["n"] += 1
        user = UserService(db_session).create_user(UserCreate(
            email=email or f"{role.value.lower()}{counter['n']}@fintrack.test",
            first_name="Test",
            last_name=role.value.title(),
            password=password,
            role=role,
        ))
        db_session.commit()
        return user

    return _make


@pytest.fixture
def admin(make_user):
    return make_user(Role.ADMIN)


@pytest.fixture
def manager(make_user):
    return make_user(Role.MANAGER)


@pytest.fixture
def comptable(make_user):
    return make_user(Role.COMPTABLE)


def _auth_headers(user) -> dict[str, str]:
    """Authorization header carrying a fresh token for the user."""
    token, _ = create_access_token(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    """Build an Authorization header for a user: auth_headers(user)."""
    return _auth_headers
