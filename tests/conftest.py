"""
Pytest configuration and fixtures for Dream List tests.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from dreamlist.config.settings import Settings
from dreamlist.domain.message import SessionMessage
from dreamlist.domain.todo import Base

from fakes import FakeDispatcher


# Use a separate in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_factory(test_engine) -> AsyncGenerator[async_sessionmaker, None]:
    """Create a session factory bound to the test engine."""
    yield async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings isolated from the environment."""
    return Settings(
        _env_file=None,
        api_url="http://dreamlist.test/api",
        gateway_url="http://gateway.test",
        transcript_dir=str(tmp_path / "sessions"),
        poll_interval_ms=1000,
        max_history=5,
        cache_multiplier=2,
        todo_backend="memory",
        data_dir=str(tmp_path),
    )


@pytest.fixture
def bank_message() -> SessionMessage:
    """A message holding a plain medium-priority task."""
    return SessionMessage(
        session_key="agent:main:main",
        message_id="m1",
        text="I need to call the bank",
    )


@pytest.fixture
def weather_message() -> SessionMessage:
    """A message without any task."""
    return SessionMessage(
        session_key="agent:main:main",
        message_id="m2",
        text="the weather is nice today",
    )


@pytest.fixture
def fake_dispatcher() -> FakeDispatcher:
    return FakeDispatcher()
