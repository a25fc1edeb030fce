"""Integration test fixtures backed by a real PostgreSQL server.

Most fixtures are inherited from tests/conftest.py. The settings fixture is
overridden so the container's database points at PostgreSQL instead of SQLite.
"""
import asyncio

import pytest
import pytest_asyncio
from testcontainers.postgres import PostgresContainer

from src.sales.config import AuthSettings, S3Settings, Settings
from src.shared.database.database import Base, Database, DatabaseSettings
from tests.mocks import JWT_SECRET


@pytest.fixture(scope="module")
def postgres_container():
    """Start a PostgreSQL container for testing. Module-scoped for reuse."""
    try:
        container = PostgresContainer("postgres:16-alpine")
        container.start()
    except Exception as e:
        pytest.skip(f"Docker is not available: {e}")
    yield container
    container.stop()


@pytest.fixture(scope="module")
def async_db_url(postgres_container):
    connection_url = postgres_container.get_connection_url()
    return connection_url.replace("postgresql+psycopg2://", "postgresql+asyncpg://")


@pytest.fixture
def test_settings(async_db_url):
    return Settings(
        environment="test",
        database_url=async_db_url,
        auth=AuthSettings(jwt_secret=JWT_SECRET),
        s3=S3Settings(bucket_name="test-documents"),
    )


# This is needed due to Colima/Mac setup and a delay in binding ports
async def wait_till_db_ready(db: Database, max_attempts: int = 20):
    for attempt in range(max_attempts):
        try:
            async with db._engine.begin():
                return
        except Exception:
            await asyncio.sleep(0.2)
    raise RuntimeError(f"Database not ready after {max_attempts} attempts")


@pytest_asyncio.fixture
async def db(test_settings):
    """Fresh schema per test on the shared PostgreSQL server."""
    db = Database(DatabaseSettings(db_url=test_settings.database_url))
    await wait_till_db_ready(db)
    async with db._engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield db
    await db.dispose()
