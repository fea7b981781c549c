"""
Tally Backend - Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Unit tests (no database):
    ├── mock_db_session: AsyncMock standing in for AsyncSession
    └── request_context: RequestContext for an authenticated test user

    API tests (real SQLite database through aiosqlite):
    ├── database: fresh tables for each test, engine disposed afterwards
    ├── test_client: HTTPX AsyncClient over ASGITransport, no session
    ├── auth_client: test_client after /auth/join + /auth/login
    └── variable_id / date_record_id: parent rows created through the API
"""

import os
import tempfile

# Override settings for testing BEFORE any tally imports
os.environ["DATABASE_URL"] = (
    f"sqlite+aiosqlite:///{tempfile.mkdtemp(prefix='tally_test_')}/test.db"
)
os.environ["COOKIE_SECRET"] = "test-cookie-secret"
os.environ["DB_SYNC_ON_STARTUP"] = "false"
os.environ["PASSWORD_HASH_ITERATIONS"] = "1000"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tally.context import Identity, RequestContext

TEST_USERNAME = "tester"
TEST_PASSWORD = "correct horse battery staple"


# ══════════════════════════════════════════════════════════════════════════
# Unit Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_lookup(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = row
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.delete = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def request_context():
    return RequestContext(
        identity=Identity(id=1, username=TEST_USERNAME),
        request_id="test-rid",
        path="/records",
    )


# ══════════════════════════════════════════════════════════════════════════
# API Test Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database():
    """
    Creates every table before the test and drops them afterwards.

    The engine is disposed at teardown so no pooled connection outlives the
    test's event loop.
    """
    import tally.models  # noqa: F401
    from tally.database import Base, engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient talking to the FastAPI app without a server.

    Cookies set by the app (the session) are kept by the client between
    requests.
    """
    from tally.main import app
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def auth_client(test_client):
    """test_client with an open session for TEST_USERNAME."""
    credentials = {"username": TEST_USERNAME, "password": TEST_PASSWORD}
    response = await test_client.post("/auth/join", json=credentials)
    assert response.status_code == 201
    response = await test_client.post("/auth/login", json=credentials)
    assert response.status_code == 200
    return test_client


@pytest_asyncio.fixture
async def variable_id(auth_client):
    response = await auth_client.post("/variables", json={"name": "weight"})
    assert response.status_code == 201
    return response.json()["data"]["id"]


@pytest_asyncio.fixture
async def date_record_id(auth_client):
    response = await auth_client.post("/date-records", json={"date": "2024-01-15"})
    assert response.status_code == 201
    return response.json()["data"]["id"]
