"""Boundary Protocols — contracts between the retrieval pipeline and its three tiers.

Invariants:
    - Pipeline NEVER imports infrastructure — dependency arrows point inward only
    - Every tier is injected into the pipeline constructor (no process-wide singletons)
    - Implementations must be safe for concurrent use by simultaneous lookups
    - Keys passed in are already normalized; tiers never re-normalize

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no inheritance
    - "Not found" is a None return; transport failures are typed exceptions
      (CacheUnavailableError, StoreUnavailableError, ExternalUnavailableError)
"""

from typing import Protocol

from app.core.domain_types import NaturalKey, Record


class RecordCache(Protocol):
    """Unauthoritative key → Record cache."""
    async def get(self, key: NaturalKey) -> Record | None: ...
    async def set(self, key: NaturalKey, record: Record) -> None: ...


class RecordStore(Protocol):
    """Durable store with a uniqueness constraint on the natural key."""
    async def find_by_key(self, key: NaturalKey) -> Record | None: ...

    async def insert(self, record: Record) -> Record:
        """Persist a record without id; raises DuplicateKeyError on collision."""
        ...

    async def initialize(self) -> None: ...


class ExternalSource(Protocol):
    """Remote source of truth. Returns None only for a definitive not-found."""
    async def fetch(self, key: NaturalKey) -> Record | None: ...
