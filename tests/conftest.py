"""
Shared pytest fixtures.
"""

import os

os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from cadence.infrastructure.local.database import init_db  # noqa: E402


@pytest_asyncio.fixture
async def engine():
    """In-memory SQLite engine shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def now():
    """Fixed clock for generation tests."""
    return datetime(2024, 1, 15, 9, 0, 0)
