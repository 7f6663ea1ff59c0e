"""
Pytest configuration and fixtures for schedule builder tests.
"""

import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import schedule_builder.models  # noqa: F401
from schedule_builder.config import Settings
from schedule_builder.main import app
from schedule_builder.routes.schedules import get_host
from schedule_builder.services.host import ScheduleHost
from schedule_builder.services.store import ScheduleStore


# In-memory database shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_QUIET_SECONDS = 0.05


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def store(test_engine):
    """A schedule store bound to the test database."""
    session_maker = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return ScheduleStore(session_maker)


@pytest_asyncio.fixture(scope="function")
async def host(store):
    """A schedule host with a short auto-save quiet period."""
    schedule_host = ScheduleHost(
        store,
        Settings(autosave_quiet_seconds=TEST_QUIET_SECONDS, autosave_backend="local"),
    )
    yield schedule_host
    await schedule_host.shutdown()


@pytest_asyncio.fixture(scope="function")
async def client(host):
    """Create an async test client wired to the test host."""
    app.dependency_overrides[get_host] = lambda: host

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
