"""Integration test fixtures for database tests.

These fixtures require a running PostgreSQL instance. The users table is
created from the ORM metadata if it does not exist yet, so a fresh
database works without running migrations first.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
import os

import pytest
import pytest_asyncio
from pydantic import SecretStr
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from infrastructure.database.engines import create_write_engine
from infrastructure.database.models import Base
from infrastructure.settings import DatabaseSettings
from users.infrastructure.models import UserModel  # noqa: F401


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (requires database)",
    )


@pytest.fixture(scope="session")
def integration_db_settings() -> DatabaseSettings:
    """Database settings for integration tests.

    Override with environment variables:
        USERBASE_DB_HOST, USERBASE_DB_PORT, etc.
    """
    return DatabaseSettings(
        host=os.getenv("USERBASE_DB_HOST", "localhost"),
        port=int(os.getenv("USERBASE_DB_PORT", "5432")),
        database=os.getenv("USERBASE_DB_DATABASE", "userbase"),
        username=os.getenv("USERBASE_DB_USERNAME", "userbase"),
        password=SecretStr(os.getenv("USERBASE_DB_PASSWORD", "userbase_dev_password")),
        pool_size=5,
    )


@pytest_asyncio.fixture
async def engine(
    integration_db_settings: DatabaseSettings,
) -> AsyncGenerator[AsyncEngine, None]:
    """Provide a write engine with the users table in place."""
    engine = create_write_engine(integration_db_settings)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(
    engine: AsyncEngine,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Provide a session factory and an empty users table.

    Rows are deleted rather than truncated so the id sequence keeps
    advancing across tests, as it does in production.
    """
    factory = async_sessionmaker(engine, expire_on_commit=False)

    async with factory() as session, session.begin():
        await session.execute(text("DELETE FROM users"))

    yield factory

    async with factory() as session, session.begin():
        await session.execute(text("DELETE FROM users"))


@pytest_asyncio.fixture
async def async_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide an async session for integration tests."""
    async with session_factory() as session:
        yield session
