"""
Pytest configuration and fixtures for backend tests.
"""

import os
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend directory to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Set test environment variables before importing config
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only"
os.environ["CORS_ORIGINS"] = '["http://localhost:3000"]'
os.environ["APP_URL"] = "http://localhost:3000"
os.environ["ADMIN_EMAIL"] = "admin@test.com"
os.environ["ADMIN_PASSWORD"] = "TestAdmin123!"
os.environ["EMAIL_PROVIDER"] = "console"

from authentication.auth import create_access_token, get_password_hash  # noqa: E402
from repositories.database import Base, enable_sqlite_foreign_keys, get_db  # noqa: E402
import repositories.db_models as db_models  # noqa: E402
from services.mail_dispatcher import MailDispatcher, get_mail_dispatcher  # noqa: E402

# Test database engine (in-memory SQLite)
TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(engine)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh in-memory database session for each test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db(db_session):
    """Alias for db_session."""
    return db_session


@pytest.fixture
def mail_provider() -> MagicMock:
    """Email transport that accepts every message."""
    return MagicMock()


@pytest.fixture
def mail_dispatcher(mail_provider):
    """Dispatcher wired to the mock transport."""
    dispatcher = MailDispatcher(
        max_workers=1,
        max_pending=10,
        failure_history=10,
        provider_factory=lambda: mail_provider,
    )
    yield dispatcher
    dispatcher.shutdown(wait=True)


@pytest.fixture(scope="function")
def client(db_session, mail_dispatcher):
    """Create a test client with overridden database and mail dependencies."""
    from main import app
    from helpers.rate_limiter import limiter

    # Reset rate limiter storage before each test to prevent rate limit errors
    limiter.reset()

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mail_dispatcher] = lambda: mail_dispatcher
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _make_user(
    db_session, email: str, display_name: str, role: db_models.Role
) -> db_models.User:
    user = db_models.User(
        email=email,
        display_name=display_name,
        hashed_password=get_password_hash("testpassword123"),
        role=role,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_user(db_session) -> db_models.User:
    """Create a regular user."""
    return _make_user(db_session, "test@example.com", "Test User", db_models.Role.USER)


@pytest.fixture
def other_user(db_session) -> db_models.User:
    """Create another regular user (for permission tests)."""
    return _make_user(
        db_session, "other@example.com", "Other User", db_models.Role.USER
    )


@pytest.fixture
def admin_user(db_session) -> db_models.User:
    """Create an admin."""
    return _make_user(
        db_session, "admin@example.com", "Admin User", db_models.Role.ADMIN
    )


@pytest.fixture
def super_admin_user(db_session) -> db_models.User:
    """Create a super-admin."""
    return _make_user(
        db_session, "root@example.com", "Super Admin", db_models.Role.SUPER_ADMIN
    )


@pytest.fixture
def test_question(db_session, test_user) -> db_models.Question:
    """Create a question written by test_user."""
    question = db_models.Question(
        title="Calculus help",
        body="<p>How do I integrate x squared?</p>",
        slug="calculus-help",
        author_id=test_user.id,
    )
    db_session.add(question)
    db_session.commit()
    db_session.refresh(question)
    return question


@pytest.fixture
def test_report(db_session, test_question, other_user) -> db_models.Report:
    """Create an unresolved report on test_question."""
    report = db_models.Report(
        question_id=test_question.id,
        reporter_id=other_user.id,
        reason="Off topic",
    )
    db_session.add(report)
    db_session.commit()
    db_session.refresh(report)
    return report


def _bearer(user: db_models.User) -> dict:
    token = create_access_token(user_id=user.id, role=user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(test_user) -> dict:
    """Get authentication headers for test user."""
    return _bearer(test_user)


@pytest.fixture
def other_auth_headers(other_user) -> dict:
    """Get authentication headers for other user."""
    return _bearer(other_user)


@pytest.fixture
def admin_auth_headers(admin_user) -> dict:
    """Get authentication headers for admin user."""
    return _bearer(admin_user)


@pytest.fixture
def super_admin_auth_headers(super_admin_user) -> dict:
    """Get authentication headers for super-admin user."""
    return _bearer(super_admin_user)


@pytest.fixture
def file_session_factory(tmp_path):
    """Session factory on a file-backed SQLite database.

    Unlike the in-memory engine, every session gets its own connection, so
    tests can run real concurrent writers against the store.
    """
    file_engine = create_engine(
        f"sqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    enable_sqlite_foreign_keys(file_engine)
    Base.metadata.create_all(bind=file_engine)
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=file_engine)
    finally:
        file_engine.dispose()
