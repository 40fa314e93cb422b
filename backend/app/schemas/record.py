"""Record Schemas — Pydantic response models for the lookup endpoints.

Invariants:
    - RecordResponse mirrors the cache wire format: {id, name, height, weight}
    - SummaryResponse.info is the formatted one-line summary

Design Decisions:
    - Built from core Record via from_record: routes never touch ORM rows
"""

from pydantic import BaseModel

from app.core.domain_types import Record
from app.core.format_summary import format_summary


class RecordResponse(BaseModel):
    """Record returned by GET /records/{key}."""
    id: int | None
    name: str
    height: int
    weight: int

    @classmethod
    def from_record(cls, record: Record) -> "RecordResponse":
        return cls(
            id=record.id, name=record.name,
            height=record.height, weight=record.weight,
        )


class SummaryResponse(BaseModel):
    """Summary returned by GET /summary/{key}."""
    info: str

    @classmethod
    def from_record(cls, record: Record) -> "SummaryResponse":
        return cls(info=format_summary(record))
