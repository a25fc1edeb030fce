"""Shared test fixtures and utilities for all tests."""
import time
from contextlib import asynccontextmanager

import jwt
import pytest
import pytest_asyncio
from dependency_injector import providers
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.client import SalesClient
from src.sales.config import AuthSettings, S3Settings, Settings
from src.sales.containers import Container
from src.sales.main import create_app
from src.shared.database.database import Database, DatabaseSettings
from tests.mocks import JWT_SECRET, SALES_REP_ID, FakeBlobStorage


@pytest.fixture
def make_token():
    """Build HS256 tokens signed with the test secret."""

    def _make_token(
        user_id: str | int = SALES_REP_ID,
        email: str = "rep@example.com",
        role: str = "sales",
        expires_in: int = 3600,
        secret: str = JWT_SECRET,
    ) -> str:
        claims = {
            "userId": user_id,
            "email": email,
            "role": role,
            "exp": int(time.time()) + expires_in,
        }
        return jwt.encode(claims, secret, algorithm="HS256")

    return _make_token


@pytest.fixture
def test_settings(tmp_path):
    """Settings for a local-only auth setup against a throwaway SQLite database."""
    return Settings(
        environment="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path}/sales.db",
        auth=AuthSettings(jwt_secret=JWT_SECRET),
        s3=S3Settings(bucket_name="test-documents"),
    )


@pytest_asyncio.fixture(scope="function")
async def db(test_settings):
    """
    Create database instance with a fresh SQLite file.
    Function-scoped for test isolation.
    """
    db = Database(DatabaseSettings(db_url=test_settings.database_url))
    await db.create_tables()
    yield db
    await db.dispose()


@pytest.fixture
def blob_storage():
    return FakeBlobStorage()


@pytest.fixture(scope="function")
def test_container(test_settings, db, blob_storage):
    """
    Create a test container with settings, database and storage overrides.
    Function-scoped to ensure each test gets a fresh container.
    """
    container = Container()
    container.config.override(providers.Object(test_settings))
    container.database.override(providers.Object(db))
    container.s3_storage.override(providers.Object(blob_storage))
    yield container
    container.unwire()
    container.reset_override()


@pytest.fixture
def test_app(test_container):
    """
    Create test application with container.
    Function-scoped for test isolation.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Database tables are already created by the db fixture
        yield

    return create_app(test_container, lifespan=lifespan)


@pytest.fixture
def client_for(test_app):
    """Build a SalesClient that talks to the test app in-process with the given token."""

    def _client_for(token: str | None = None) -> SalesClient:
        http_client = AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test")
        return SalesClient(base_url="http://test", token=token, client=http_client)

    return _client_for


@pytest_asyncio.fixture
async def sales_client(client_for, make_token):
    """SalesClient authenticated as a sales rep."""
    client = client_for(make_token())
    async with client:
        yield client
    await client.client.aclose()


# =========================================================================
# Common repository and service fixtures (available to all test directories)
# =========================================================================

@pytest.fixture
def client_repository(test_container):
    """Get client repository from container."""
    return test_container.client_repository()


@pytest.fixture
def unit_of_work(test_container):
    """Get unit of work from container."""
    return test_container.unit_of_work()


@pytest.fixture
def document_service(test_container):
    """Get document service from container."""
    return test_container.document_service()


@pytest.fixture
def client_service(test_container):
    """Get client service from container."""
    return test_container.client_service()
