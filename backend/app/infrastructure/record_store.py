"""SQL Record Store — RecordStore implementation over the async session manager.

Invariants:
    - find_by_key compares the already-normalized key verbatim (no lower() in SQL)
    - insert never overwrites: a uniqueness violation becomes DuplicateKeyError
    - One short-lived session per operation; no transaction spans tiers
    - Connectivity failures surface as StoreUnavailableError (via DatabaseSessionManager)

Design Decisions:
    - ORM rows converted to core Record at this boundary: pipeline never sees SQLAlchemy objects
    - IntegrityError caught here, inside the session block, so the manager's
      generic mapping only handles real outages
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.core.domain_types import NaturalKey, Record
from app.core.errors import DuplicateKeyError
from app.infrastructure.database import DatabaseSessionManager
from app.models.record import Record as RecordModel

logger = logging.getLogger(__name__)


class SqlRecordStore:
    """Record store backed by the records table."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def initialize(self) -> None:
        await self._db.create_schema()
        logger.info("Record store schema ready")

    async def find_by_key(self, key: NaturalKey) -> Record | None:
        async with self._db.session() as session:
            result = await session.execute(
                select(RecordModel).where(RecordModel.name == key),
            )
            row = result.scalar_one_or_none()
            return _to_record(row) if row else None

    async def insert(self, record: Record) -> Record:
        """Insert a new row and return it with its assigned id."""
        async with self._db.session() as session:
            row = RecordModel(
                name=record.name, height=record.height, weight=record.weight,
            )
            session.add(row)
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.info(
                    "Duplicate insert rejected",
                    extra={"record_key": record.name, "tier": "store"},
                )
                raise DuplicateKeyError(record.name)
            return record.with_id(row.id)


def _to_record(row: RecordModel) -> Record:
    return Record(
        id=row.id, name=NaturalKey(row.name), height=row.height, weight=row.weight,
    )
