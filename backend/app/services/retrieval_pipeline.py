"""Retrieval Pipeline — cache-aside / read-through lookup across cache, store, external source.

Invariants:
    - Blank keys rejected before any tier is touched
    - Key normalized exactly once, then reused unchanged for every tier
    - Tiers consulted strictly in order cache → store → external; never in parallel
    - Cache hit returns immediately with no write-back
    - Only presence is cached; not-found and transient failures write nothing
    - Write-back failures never change the returned result
    - DuplicateKeyError from insert is recovered by re-reading the store, never surfaced
    - Cache read failures follow one configured CacheFailurePolicy for every call site

Design Decisions:
    - Tiers injected via constructor as Protocols (ADR: no global connection handles)
    - Single-flight wraps only the slow path (store miss → external → insert):
      cache and store hits never wait on another request's fetch
    - Persisted name is the normalized lookup key, not the source's echo of it,
      so cache key, store key and request key can never diverge
"""

import logging

from app.core.domain_types import (
    CacheFailurePolicy, LookupResult, LookupTier, NaturalKey, Record, normalize_key,
)
from app.core.errors import (
    CacheUnavailableError, DuplicateKeyError, RecordNotFoundError, StoreUnavailableError,
)
from app.core.repository_protocols import ExternalSource, RecordCache, RecordStore
from app.services.single_flight import SingleFlight

logger = logging.getLogger(__name__)


class RecordRetrievalPipeline:
    """Orchestrates the three lookup tiers for a single key."""

    def __init__(
        self,
        cache: RecordCache,
        store: RecordStore,
        source: ExternalSource,
        cache_policy: CacheFailurePolicy = CacheFailurePolicy.DEGRADE,
        single_flight: SingleFlight[LookupResult] | None = None,
    ):
        self.cache = cache
        self.store = store
        self.source = source
        self.cache_policy = cache_policy
        self._single_flight = single_flight

    async def lookup(self, raw_key: str) -> LookupResult:
        """Find a record by name.

        Raises LookupValidationError, RecordNotFoundError, ExternalUnavailableError,
        StoreUnavailableError, or (STRICT policy only) CacheUnavailableError.
        """
        key = normalize_key(raw_key)

        cached = await self._read_cache(key)
        if cached is not None:
            logger.debug("Cache hit", extra={"record_key": key, "tier": "cache"})
            return LookupResult(cached, LookupTier.CACHE)

        stored = await self.store.find_by_key(key)
        if stored is not None:
            logger.debug("Store hit", extra={"record_key": key, "tier": "store"})
            await self._write_back(key, stored)
            return LookupResult(stored, LookupTier.STORE)

        if self._single_flight is None:
            return await self._fetch_and_persist(key)
        return await self._single_flight.do(
            key, lambda: self._fetch_and_persist(key),
        )

    async def _fetch_and_persist(self, key: NaturalKey) -> LookupResult:
        """Slow path: external fetch, insert with duplicate recovery, write-back."""
        fetched = await self.source.fetch(key)
        if fetched is None:
            logger.info(
                "Record not found at external source",
                extra={"record_key": key, "tier": "external"},
            )
            raise RecordNotFoundError(key)

        candidate = Record(name=key, height=fetched.height, weight=fetched.weight)
        try:
            record = await self.store.insert(candidate)
            source = LookupTier.EXTERNAL
            logger.info(
                "Persisted record from external source",
                extra={"record_key": key, "tier": "external"},
            )
        except DuplicateKeyError:
            record = await self._read_after_write(key)
            source = LookupTier.STORE

        await self._write_back(key, record)
        return LookupResult(record, source)

    async def _read_after_write(self, key: NaturalKey) -> Record:
        """Recover from losing an insert race by reading the winner's row."""
        logger.info(
            "Concurrent insert detected, re-reading store",
            extra={"record_key": key, "tier": "store"},
        )
        record = await self.store.find_by_key(key)
        if record is None:
            raise StoreUnavailableError(
                "row missing after duplicate-key conflict", "read_after_write",
            )
        return record

    async def _read_cache(self, key: NaturalKey) -> Record | None:
        try:
            return await self.cache.get(key)
        except CacheUnavailableError as e:
            if self.cache_policy is CacheFailurePolicy.STRICT:
                raise
            logger.warning(
                f"Cache unavailable, bypassing: {e.message}",
                extra={"record_key": key, "policy": self.cache_policy.value},
            )
            return None

    async def _write_back(self, key: NaturalKey, record: Record) -> None:
        try:
            await self.cache.set(key, record)
        except CacheUnavailableError as e:
            logger.warning(
                f"Cache write-back failed: {e.message}",
                extra={"record_key": key, "tier": "cache"},
            )
