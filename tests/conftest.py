"""
Pytest configuration and fixtures for testing.
"""
import os
import tempfile

# Settings are read at import time, so the environment has to be in place first.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="happening-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}"
os.environ.setdefault("PASSWORD_SALT", "c29tZXNhbHR2YWx1ZTEyMw")
os.environ["ENVIRONMENT"] = "test"

import pytest
import pytest_asyncio
from typing import AsyncGenerator
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

import happening.db.models  # noqa: F401
from happening.api.routes import users as users_routes
from happening.core.security import hash_password
from happening.db.models import Event, User
from happening.db.session import AsyncSessionLocal, Base, enable_sqlite_foreign_keys, get_session
from happening.main import app

TEST_DATABASE_URL = os.environ["DATABASE_URL"]
TEST_PASSWORD = "password123"

# Create test engine
test_engine = create_async_engine(
    TEST_DATABASE_URL,
    poolclass=NullPool,  # Disable connection pooling for tests
    echo=False,
)
enable_sqlite_foreign_keys(test_engine)

# The session middleware opens its own sessions through AsyncSessionLocal,
# so point the shared factory at the test engine too.
AsyncSessionLocal.configure(bind=test_engine)


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create a fresh schema and database session for each test.
    """
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


def _make_client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    Create an async HTTP client for testing the pages.
    Overrides the database session dependency.
    """
    async def override_get_session():
        yield db_session

    app.dependency_overrides[get_session] = override_get_session

    async with _make_client() as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def other_client(client: AsyncClient) -> AsyncGenerator[AsyncClient, None]:
    """A second browser with its own cookie jar, sharing the same overrides."""
    async with _make_client() as ac:
        yield ac


async def _create_user(db_session: AsyncSession, email: str, username: str) -> User:
    user = User(email=email, username=username, password=hash_password(TEST_PASSWORD))
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


async def login(ac: AsyncClient, email: str, password: str = TEST_PASSWORD):
    return await ac.post("/login", data={"email": email, "password": password})


@pytest_asyncio.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "alice@example.com", "alice")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "bob@example.com", "bob")


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession, test_user: User) -> Event:
    """An event owned by test_user."""
    event = Event(
        title="Board Games Night",
        url="https://example.com/board-games",
        location="Lund",
        category="Social",
        date="2025-06-01",
        user_id=test_user.id,
    )
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event


@pytest_asyncio.fixture
async def user_client(client: AsyncClient, test_user: User) -> AsyncClient:
    """client, logged in as test_user."""
    response = await login(client, test_user.email)
    assert response.status_code == 303
    # drop the "Login successful!" flash so pages start clean
    await client.get("/")
    return client


@pytest_asyncio.fixture
async def other_user_client(other_client: AsyncClient, other_user: User) -> AsyncClient:
    """other_client, logged in as other_user."""
    response = await login(other_client, other_user.email)
    assert response.status_code == 303
    await other_client.get("/")
    return other_client


@pytest.fixture(autouse=True)
def disable_rate_limiting(monkeypatch):
    """Disable rate limiting for all tests."""
    monkeypatch.setattr(users_routes.limiter, "enabled", False)
