"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.pool import StaticPool

from coral_auth.config import Settings
from coral_auth.db import Database, get_db
from coral_auth.main import create_app
from coral_auth.models.user import User
from coral_auth.users import UserService

# Test database URL (uses SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_SECRET_KEY = "test-secret-key-0123456789-abcdefghijklmnop"
TEST_PASSWORD = "correct horse battery staple"


@pytest.fixture
def settings() -> Settings:
    """Settings with every provider configured."""
    return Settings(
        _env_file=None,
        app_env="test",
        app_secret_key=TEST_SECRET_KEY,
        database_url=TEST_DATABASE_URL,
        root_url="http://testserver",
        debug="",
        facebook_app_id="fb-app-id",
        facebook_app_secret="fb-app-secret",
        twitter_consumer_key="tw-consumer-key",
        twitter_consumer_secret="tw-consumer-secret",
        google_client_id="google-client-id",
        google_client_secret="google-client-secret",
    )


@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """In-memory database with the schema created."""
    db = Database(TEST_DATABASE_URL, poolclass=StaticPool)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with database.session() as session:
        yield session


@pytest.fixture
def users(db_session: AsyncSession) -> UserService:
    return UserService(db_session)


@pytest_asyncio.fixture
async def local_user(users: UserService, db_session: AsyncSession) -> User:
    """An enabled user with local credentials."""
    user = await users.create_local_user("alice@example.com", TEST_PASSWORD, "alice")
    await db_session.commit()
    return user


@pytest_asyncio.fixture
async def disabled_user(users: UserService, db_session: AsyncSession) -> User:
    """A disabled user with local credentials."""
    user = await users.create_local_user("mallory@example.com", TEST_PASSWORD, "mallory")
    user.disabled = True
    await db_session.commit()
    return user


@pytest.fixture
def app(settings: Settings, database: Database, db_session: AsyncSession) -> FastAPI:
    """Application sharing the test session."""
    application = create_app(settings, database=database)

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client; cookies (and so the session) persist across requests."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def password() -> str:
    """Plain-text password of the local_user / disabled_user fixtures."""
    return TEST_PASSWORD
