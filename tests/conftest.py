"""Pytest fixtures for async FastAPI testing.

Loads `.env.test`, initializes a clean SQLite test database, and provides
an `AsyncClient` plus small factories for users and signed-in sessions.
"""
import pathlib
import uuid

import pytest
from dotenv import load_dotenv

ROOT = pathlib.Path(__file__).resolve().parent.parent

# Settings are read at import time, so the test env must win before any
# storefront module is imported.
load_dotenv(dotenv_path=str(ROOT / ".env.test"), override=True)

STRONG_PASSWORD = "Str0ngPassw0rd!"


@pytest.fixture(scope="session")
def database():
    """Create clean schema for the test session."""
    from storefront.core.config import settings
    from storefront.core.database import Database

    db = Database.from_settings(settings)
    db.drop_all()
    db.create_all()

    yield db

    db.drop_all()
    db.dispose()


@pytest.fixture
def db_session(database):
    """Yield a SQLAlchemy session for direct DB access in tests."""
    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def app(database):
    from storefront.main import create_app

    return create_app(database=database)


@pytest.fixture
async def async_client(app):
    """Provide an httpx AsyncClient configured with the FastAPI app."""
    from httpx import ASGITransport, AsyncClient

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client


@pytest.fixture
def unique_email():
    def _make(prefix: str = "user") -> str:
        return f"{prefix}-{uuid.uuid4().hex[:10]}@example.com"

    return _make


@pytest.fixture
def session_token():
    """Pull the session token out of a response's Set-Cookie headers."""
    from storefront.core.config import settings

    def _extract(response):
        prefix = f"{settings.SESSION_COOKIE_NAME}="
        for header in response.headers.get_list("set-cookie"):
            if header.startswith(prefix):
                return header.split(";", 1)[0][len(prefix):]
        return None

    return _extract


@pytest.fixture
def cookie_headers():
    from storefront.core.config import settings

    def _headers(token: str) -> dict:
        return {"Cookie": f"{settings.SESSION_COOKIE_NAME}={token}"}

    return _headers


@pytest.fixture
def create_user(db_session, unique_email):
    """Insert a user directly, bypassing the API."""
    from storefront.core.security import hash_password
    from storefront.models.user import User

    def _create(password: str = STRONG_PASSWORD, **fields):
        user = User(
            email=fields.pop("email", None) or unique_email(),
            phone=fields.pop("phone", "+1 555 0100"),
            first_name=fields.pop("first_name", "Test"),
            last_name=fields.pop("last_name", "User"),
            password_hash=hash_password(password),
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _create


@pytest.fixture
def register_payload(unique_email):
    def _payload(**overrides) -> dict:
        payload = {
            "email": unique_email(),
            "password": STRONG_PASSWORD,
            "firstName": "Ada",
            "lastName": "Lovelace",
            "phone": "+44 20 7946 0958",
        }
        payload.update(overrides)
        return payload

    return _payload


@pytest.fixture
def sign_in(async_client, session_token):
    """Sign in over HTTP and return `(response, token)`.

    The client's cookie jar is cleared afterwards so every request in a test
    states its cookie explicitly.
    """

    async def _sign_in(email: str, password: str = STRONG_PASSWORD, **extra):
        response = await async_client.post("/api/auth/signin", json={"email": email, "password": password, **extra})
        async_client.cookies.clear()
        return response, session_token(response)

    return _sign_in


@pytest.fixture
def register(async_client, session_token, register_payload):
    async def _register(**overrides):
        payload = register_payload(**overrides)
        response = await async_client.post("/api/auth/register", json=payload)
        async_client.cookies.clear()
        return response, session_token(response), payload

    return _register
