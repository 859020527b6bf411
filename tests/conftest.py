"""
CloudMemo - Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── db_tables: Fresh memos table in a throwaway SQLite file
    ├── kv: Fresh MemoryKeyValueStore injected into the app
    ├── test_client: HTTPX AsyncClient wired to the app via ASGITransport
    ├── auth_headers: Bearer header from a real POST /api/login
    └── mock_db_session: Mock AsyncSession for service-level tests
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

# Settings are read at import time, so the environment is fixed before any
# cloudmemo module is imported.
TEST_PASSWORD = "correct horse battery staple"
ALLOWED_ORIGIN = "http://allowed.test"

_db_dir = tempfile.mkdtemp(prefix="cloudmemo_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_db_dir}/test.db"
os.environ["KV_URL"] = "memory://"
os.environ["APP_PASSWORD"] = TEST_PASSWORD
os.environ["API_PREFIX"] = "/api"
os.environ["CORS_ALLOWED_ORIGINS"] = f"{ALLOWED_ORIGIN},http://localhost:5173"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402


@pytest_asyncio.fixture
async def db_tables():
    """
    Creates the schema before the test and drops it afterwards.

    The engine is disposed at teardown because pooled aiosqlite connections
    belong to the event loop of the test that opened them.
    """
    from cloudmemo.database import Base, dispose_engine, engine
    from cloudmemo.models.memo import Memo  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await dispose_engine()


@pytest.fixture
def kv():
    """A fresh in-process key-value store behind Depends(get_kv_store)."""
    from cloudmemo.main import app
    from cloudmemo.services.kv_store import MemoryKeyValueStore, get_kv_store

    store = MemoryKeyValueStore()
    app.dependency_overrides[get_kv_store] = lambda: store
    yield store
    app.dependency_overrides.pop(get_kv_store, None)


@pytest_asyncio.fixture
async def test_client(db_tables, kv):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from cloudmemo.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def auth_headers(test_client):
    """Authorization header carrying a freshly minted session token."""
    response = await test_client.post("/api/login", json={"password": TEST_PASSWORD})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_memo(mock_db_session):
            mock_db_session.get.return_value = memo
            result = await memo_service.get_memo(mock_db_session, kv, 1)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.get = AsyncMock()
    session.delete = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session
