"""Database Session Manager — async connection pool with automatic rollback, schema bootstrap, and health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - Connection pool uses pool_pre_ping for stale connection detection
    - All SQLAlchemy exceptions mapped to StoreUnavailableError (core/errors.py)
    - create_schema() is idempotent: creates missing tables only, never drops

Design Decisions:
    - Manager instance built in the FastAPI lifespan and injected into the record store
      (ADR: no module-level singleton reached via ambient lookup)
    - expire_on_commit=False: prevents lazy-load issues in async context
    - SQLite URLs skip pool sizing: its pools reject pool_size/max_overflow (tests, local dev)
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy import text

from app.core.errors import StoreUnavailableError
from app.db.base import Base
from app import models  # noqa: F401  (populates Base.metadata)

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self,
        database_url: str | None = None,
        pool_size: int = 20,
        max_overflow: int = 10,
        *,
        engine: AsyncEngine | None = None,
    ):
        """Build an engine from database_url, or wrap a ready engine (tests, scripts)."""
        if engine is None:
            if database_url is None:
                raise ValueError("database_url or engine is required")
            engine = _create_engine(database_url, pool_size, max_overflow)
        self.engine = engine
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except IntegrityError as e:
            await session.rollback()
            logger.error(f"DB integrity error: {e}")
            raise StoreUnavailableError("Integrity constraint violated", "commit")
        except OperationalError as e:
            await session.rollback()
            logger.error(f"DB operational error: {e}")
            raise StoreUnavailableError("Connection or operational error", "execute")
        except DBAPIError as e:
            await session.rollback()
            logger.error(f"DB driver error: {e}")
            raise StoreUnavailableError("Database driver error", "query")
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"SQLAlchemy error: {e}")
            raise StoreUnavailableError("Database operation failed", "unknown")
        except OSError as e:
            await session.rollback()
            logger.error(f"DB connection error: {e}")
            raise StoreUnavailableError("Database unreachable", "connect")
        finally:
            await session.close()

    async def create_schema(self) -> None:
        """Create missing tables and constraints. Existing data untouched."""
        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Schema bootstrap failed: {e}")
            raise StoreUnavailableError("Schema creation failed", "initialize")

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


def _create_engine(database_url: str, pool_size: int, max_overflow: int) -> AsyncEngine:
    if database_url.startswith("sqlite"):
        return create_async_engine(database_url)
    return create_async_engine(
        database_url,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_pre_ping=True,
        pool_recycle=3600,
    )
