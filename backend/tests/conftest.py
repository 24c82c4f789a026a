"""
MediRate Admin Backend — Test Configuration (conftest.py)
===========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Environment variables are set before any `medirate` import so the
       settings singleton is built from test values.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock standing in for AsyncSession
    ├── make_token:      Mints signed bearer tokens for any email/roles
    ├── admin_headers:   Authorization header for an allow-listed admin
    ├── user_headers:    Authorization header for a signed-in non-admin
    └── test_client:     HTTPX AsyncClient over the ASGI app, with the DB
                         session dependency replaced by mock_db_session
"""

import os
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup (before any medirate import)
# ══════════════════════════════════════════════════════════════════════════

TEST_JWT_SECRET = "test-secret-key-with-enough-bytes-for-hs256"
ADMIN_EMAIL = "admin@medirate.test"
OPS_EMAIL = "ops@medirate.test"
USER_EMAIL = "someone@example.com"

os.environ["JWT_SECRET_KEY"] = TEST_JWT_SECRET
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["ADMIN_EMAILS"] = f"{ADMIN_EMAIL}, {OPS_EMAIL}"
os.environ["ADMIN_ROLE"] = "admin"
os.environ["BLOB_READ_WRITE_TOKEN"] = "vercel_blob_rw_test"
os.environ["SMTP_HOST"] = "smtp.test"
os.environ["EMAIL_FROM"] = "noreply@medirate.test"
os.environ["EMAIL_TO"] = "contact@medirate.test"
os.environ["SITE_URL"] = "http://site.test"
os.environ["STRIPE_SECRET_KEY"] = ""
os.environ["RATE_LIMIT_REQUESTS"] = "10000"
os.environ["LOG_LEVEL"] = "WARNING"

import jwt  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from medirate.database import get_db_session  # noqa: E402
from medirate.main import app  # noqa: E402


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.return_value.one_or_none.return_value = (1, "a@b.c", "user")
    """
    session = AsyncMock()
    session.execute = AsyncMock(return_value=MagicMock())
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def make_token():
    def _make(email=USER_EMAIL, roles=None, expires_in=3600, secret=TEST_JWT_SECRET, **extra):
        claims = {
            "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
            "iat": datetime.now(timezone.utc),
            **extra,
        }
        if email is not None:
            claims["email"] = email
        if roles is not None:
            claims["roles"] = roles
        return jwt.encode(claims, secret, algorithm="HS256")

    return _make


@pytest.fixture
def admin_headers(make_token):
    return {"Authorization": f"Bearer {make_token(ADMIN_EMAIL)}"}


@pytest.fixture
def user_headers(make_token):
    return {"Authorization": f"Bearer {make_token(USER_EMAIL)}"}


@pytest_asyncio.fixture
async def test_client(mock_db_session):
    """
    HTTPX AsyncClient configured to talk to the FastAPI app in-process.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """

    async def _override_db():
        yield mock_db_session

    app.dependency_overrides[get_db_session] = _override_db
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()
