"""
Product API — Test Configuration (conftest.py)
================================================

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── mock_db_session: Mock database session (no real DB needed)
    ├── sample_product_data: Field values for a stored product
    ├── database_url: Throwaway SQLite file under tmp_path
    ├── test_client: HTTPX AsyncClient over a connected app
    └── disconnected_client: HTTPX AsyncClient with no database opened
"""

import os
from datetime import datetime, timezone
from uuid import uuid4

# Override settings for testing BEFORE any app imports
os.environ["DB_NAME"] = "test-user"
os.environ["DB_PASSWORD"] = "test-password-not-real"
os.environ["DATABASE_URL_TEMPLATE"] = "sqlite+aiosqlite:///./test_products.db"
os.environ["ENVIRONMENT"] = "test"
os.environ["PUBLIC_DIR"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.database import connect_database, dispose_engine  # noqa: E402


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = product
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
def sample_product_data():
    now = datetime.now(timezone.utc)
    return {
        "id": uuid4(),
        "name": "Mechanical Keyboard",
        "quantity": 12,
        "price": 89.5,
        "image": "https://cdn.example.com/keyboard.png",
        "created_at": now,
        "updated_at": now,
    }


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'products.db'}"


@pytest_asyncio.fixture
async def test_client(database_url):
    """
    HTTPX AsyncClient talking to the app with a real (SQLite) database.

    ASGITransport does not run the lifespan, so the database is opened
    and disposed here around the client.
    """
    from app.main import app

    await connect_database(database_url)
    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        await dispose_engine()


@pytest_asyncio.fixture
async def disconnected_client():
    """Client for an app whose database was never opened."""
    from app.main import app

    await dispose_engine()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
