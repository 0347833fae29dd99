"""
Pytest configuration and fixtures.
"""

import sys
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Add project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from timesheet.domain.models import Activity, TimeEntry
from timesheet.infra.db import Base


@pytest_asyncio.fixture
async def db_engine():
    """Create an in-memory SQLite database for testing"""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Create a new session for a test"""
    async_session = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:
        yield session


@pytest.fixture
def users():
    """uid -> display name"""
    return {"user1": "John Doe", "user2": "Jane Smith"}


@pytest.fixture
def activities():
    return [
        Activity(id="meeting", label="Meeting", color="#10B981"),
        Activity(id="development", label="Development", color="#3B82F6"),
    ]


@pytest.fixture
def entries():
    """Two entries for John and one for Jane on the same day (local times)"""
    return [
        TimeEntry(id="entry1", user_id="user1", date="2024-01-15", activity="meeting",
                  start_time="09:00", end_time="10:30", notes="Team standup"),
        TimeEntry(id="entry2", user_id="user1", date="2024-01-15", activity="development",
                  start_time="10:30", end_time="12:00"),
        TimeEntry(id="entry3", user_id="user2", date="2024-01-15", activity="meeting",
                  start_time="14:00", end_time="15:00", notes="Client call"),
    ]
