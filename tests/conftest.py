"""Pytest configuration and shared fixtures.

Every test that touches the database gets its own SQLite file under
``tmp_path``, so tests stay isolated without any cleanup pass.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from hedge.db.session import build_engine
from hedge.migrations import SchemaStore


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """URL of a fresh, empty store file."""
    return f"sqlite+aiosqlite:///{tmp_path / 'hedge.db'}"


@pytest_asyncio.fixture
async def engine(database_url: str) -> AsyncIterator[AsyncEngine]:
    """Engine on an empty store (no tables yet)."""
    engine = build_engine(database_url)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def store(engine: AsyncEngine) -> SchemaStore:
    """Schema store loaded with the packaged migrations."""
    return SchemaStore(engine)


@pytest_asyncio.fixture
async def migrated_engine(engine: AsyncEngine, store: SchemaStore) -> AsyncEngine:
    """Engine on a store upgraded to the latest version."""
    await store.upgrade()
    return engine


@pytest_asyncio.fixture
async def session_maker(migrated_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(migrated_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(
    session_maker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """Session on a fully migrated store (function-scoped)."""
    async with session_maker() as session:
        yield session
