"""
Database setup and session management for the sqlite todo backend.
"""

from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from dreamlist.domain.todo import Base


def create_session_factory(
    database_url: str,
    echo: bool = False,
) -> Tuple[AsyncEngine, async_sessionmaker]:
    """
    Create an async engine and its session factory.

    Args:
        database_url: SQLAlchemy URL, e.g. sqlite+aiosqlite:///./todos.db
        echo: Log SQL statements

    Returns:
        (engine, session factory)
    """
    # StaticPool keeps a single SQLite connection shared across requests
    engine = create_async_engine(
        database_url,
        echo=echo,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
    return engine, session_factory


async def init_database(engine: AsyncEngine) -> None:
    """Create tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
