"""Domain Types — the Record entity, the normalized lookup key, and lookup enums.

Invariants:
    - NaturalKey is always stripped and case-folded; normalize_key is idempotent
    - Blank keys never become a NaturalKey (LookupValidationError instead)
    - Record is immutable; id is None until the store assigns one
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrapper for NaturalKey: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and settings without custom encoders
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import NewType

from app.core.errors import LookupValidationError


# ─── Identity Types ──────────────────────────────────────────────

NaturalKey = NewType("NaturalKey", str)

MAX_KEY_LENGTH = 255  # matches records.name column width


def normalize_key(raw_key: str | None) -> NaturalKey:
    """Strip and case-fold a user-supplied key. Raises on blank input."""
    if raw_key is None or not raw_key.strip():
        raise LookupValidationError("Lookup key cannot be empty or whitespace")
    key = raw_key.strip().casefold()
    if len(key) > MAX_KEY_LENGTH:
        raise LookupValidationError(
            f"Lookup key exceeds {MAX_KEY_LENGTH} characters",
        )
    return NaturalKey(key)


# ─── Entities ────────────────────────────────────────────────────

@dataclass(frozen=True)
class Record:
    """A looked-up entity. height/weight are immutable once created."""
    name: NaturalKey
    height: int
    weight: int
    id: int | None = None

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def with_id(self, record_id: int) -> "Record":
        return replace(self, id=record_id)


# ─── Enums ───────────────────────────────────────────────────────

class CacheFailurePolicy(str, Enum):
    """What a cache read transport failure does to the lookup.

    STRICT escalates to CacheUnavailableError; DEGRADE logs and consults the store.
    Write-back failures are non-fatal under both policies.
    """
    STRICT = "strict"
    DEGRADE = "degrade"


class LookupTier(str, Enum):
    """Tier that satisfied a lookup, in consultation order."""
    CACHE = "cache"
    STORE = "store"
    EXTERNAL = "external"


@dataclass(frozen=True)
class LookupResult:
    """Outcome of a successful lookup."""
    record: Record
    source: LookupTier
