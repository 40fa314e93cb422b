"""Infrastructure fixtures — in-memory SQLite engine wrapped in the real session manager.

Design Decisions:
    - StaticPool: every session shares the one in-memory database
    - Schema created through SqlRecordStore.initialize(), the production path
"""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from app.infrastructure.database import DatabaseSessionManager
from app.infrastructure.record_store import SqlRecordStore


@pytest.fixture
async def db_manager():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    yield DatabaseSessionManager(engine=engine)
    await engine.dispose()


@pytest.fixture
async def record_store(db_manager):
    store = SqlRecordStore(db_manager)
    await store.initialize()
    return store
