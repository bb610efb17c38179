"""Shared test fixtures: in-memory database, app wired with test settings, captured mail."""

import os

# Settings are read at import time by app.main; keep tests off real services
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["REFRESH_TOKEN_SECRET"] = ""
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SENDGRID_API_KEY"] = ""
os.environ["ADMIN_EMAIL"] = ""
os.environ["ADMIN_NICK"] = ""
os.environ["ADMIN_PASSWORD"] = ""

from unittest.mock import MagicMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.config import Settings  # noqa: E402
from app.constants import AuthProvider, UserRole  # noqa: E402
from app.database import Base, create_session_factory, get_db  # noqa: E402
from app.dependencies.services import get_email_service  # noqa: E402
from app.main import create_app  # noqa: E402
from app.models.user import User  # noqa: E402
from app.rate_limiter import limiter  # noqa: E402
from app.services.auth.passwords import PasswordHasher  # noqa: E402
from app.services.auth.token_service import TokenService  # noqa: E402
from app.services.email_service import EmailService  # noqa: E402

TEST_PASSWORD = "SecurePass123"


def make_settings(**overrides) -> Settings:
    values = {
        "database_url": "sqlite://",
        "jwt_secret_key": "test-secret-key",
        "refresh_token_secret": "test-refresh-secret",
        "bcrypt_rounds": 4,
        "sendgrid_api_key": "",
        "admin_email": "",
        "admin_nick": "",
        "admin_password": "",
    }
    values.update(overrides)
    return Settings(**values)


def create_user(
    db_session_maker,
    email: str,
    nick: str,
    password: str = TEST_PASSWORD,
    role: UserRole = UserRole.USER,
    email_verified: bool = True,
    is_active: bool = True,
    provider: AuthProvider = AuthProvider.LOCAL,
) -> User:
    """Insert a user directly, bypassing registration."""
    db = db_session_maker()
    user = User(
        email=email,
        nick=nick,
        password_hash=PasswordHasher(rounds=4).hash(password) if password else None,
        role=role,
        provider=provider,
        email_verified=email_verified,
        is_active=is_active,
    )
    db.add(user)
    db.commit()
    db.close()
    return user


def login(test_client: TestClient, email: str, password: str = TEST_PASSWORD) -> dict:
    """Log in and return the token response.

    The client's cookie jar is cleared afterwards so later requests only
    carry the credentials a test passes explicitly.
    """
    response = test_client.post("/api/auth/login", json={"email": email, "password": password})
    test_client.cookies.clear()
    assert response.status_code == 200, response.text
    return response.json()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_settings() -> Settings:
    return make_settings()


@pytest.fixture
def token_service(test_settings) -> TokenService:
    return TokenService(test_settings)


@pytest.fixture
def engine():
    """In-memory SQLite shared across threads via StaticPool."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session_maker(engine):
    return create_session_factory(engine)


@pytest.fixture
def db_session(db_session_maker):
    session = db_session_maker()
    yield session
    session.close()


@pytest.fixture
def mailer() -> MagicMock:
    """Stands in for SendGrid; tests read issued tokens from its call args."""
    return MagicMock(spec=EmailService)


@pytest.fixture
def app(test_settings, db_session_maker, mailer):
    """Application wired to the in-memory database and the captured mailer."""
    limiter.reset()
    application = create_app(test_settings)

    def override_get_db():
        db = db_session_maker()
        try:
            yield db
        finally:
            db.close()

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_email_service] = lambda: mailer
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def auth_client(app, db_session_maker):
    """Create test client with in-memory database for auth tests.

    Yields a tuple of (TestClient, SessionMaker) for use in tests.
    """
    with TestClient(app) as test_client:
        yield test_client, db_session_maker
