"""Record ORM — persisted copy of an externally sourced record.

Invariants:
    - id is an integer primary key assigned by the database
    - name is the normalized natural key, unique (uq_records_name)
    - height/weight never updated after insert

Design Decisions:
    - Named unique constraint: alembic migration and create_all produce identical schema
    - No timestamps: rows are write-once and never expire
"""

from sqlalchemy import Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Record(Base):
    """Row in the records table."""
    __tablename__ = "records"
    __table_args__ = (
        UniqueConstraint("name", name="uq_records_name"),
    )

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    height: Mapped[int] = mapped_column(Integer, nullable=False)
    weight: Mapped[int] = mapped_column(Integer, nullable=False)
