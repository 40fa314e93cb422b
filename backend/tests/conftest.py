"""Root conftest — shared test configuration and in-memory tier fakes.

Invariants:
    - Tests never touch a real database, Redis, or the network
    - Fakes honour the same contracts as the real tiers: normalized keys in,
      None for misses, typed errors for transport failures, unique names in the store

Design Decisions:
    - Fakes exposed as fixtures (not importable helpers): every test gets fresh state
    - Fakes count their calls so tests assert tier traffic, not just results
"""

import asyncio
import os

import pytest

# Ensure tests don't accidentally point at real services
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("LOG_FORMAT", "text")

from app.core.domain_types import CacheFailurePolicy, LookupResult, Record  # noqa: E402
from app.core.errors import (  # noqa: E402
    CacheUnavailableError, DuplicateKeyError, StoreUnavailableError,
)
from app.core.record_codec import (  # noqa: E402
    RecordDecodeError, cache_key, decode_record, encode_record,
)
from app.services.retrieval_pipeline import RecordRetrievalPipeline  # noqa: E402
from app.services.single_flight import SingleFlight  # noqa: E402


class FakeCache:
    """Dict-backed cache storing the real wire format under the real key layout."""

    def __init__(self):
        self.entries: dict[str, str] = {}
        self.get_calls: list[str] = []
        self.set_calls: list[str] = []
        self.fail_get = False
        self.fail_set = False

    async def get(self, key):
        self.get_calls.append(key)
        if self.fail_get:
            raise CacheUnavailableError("connection refused", "get")
        raw = self.entries.get(cache_key(key))
        if raw is None:
            return None
        try:
            return decode_record(raw, key)
        except RecordDecodeError:
            return None

    async def set(self, key, record):
        self.set_calls.append(key)
        if self.fail_set:
            raise CacheUnavailableError("connection refused", "set")
        self.entries[cache_key(key)] = encode_record(record)


class FakeStore:
    """Record store with a uniqueness constraint on name and sequential ids."""

    def __init__(self):
        self.rows: dict[str, Record] = {}
        self.find_calls: list[str] = []
        self.insert_calls: list[str] = []
        self.fail = False
        self._next_id = 1

    def seed(self, record: Record) -> Record:
        stored = record if record.id else record.with_id(self._next_id)
        self._next_id = max(self._next_id, stored.id) + 1
        self.rows[stored.name] = stored
        return stored

    async def initialize(self):
        pass

    async def find_by_key(self, key):
        self.find_calls.append(key)
        if self.fail:
            raise StoreUnavailableError("connection refused", "execute")
        return self.rows.get(key)

    async def insert(self, record):
        self.insert_calls.append(record.name)
        if self.fail:
            raise StoreUnavailableError("connection refused", "commit")
        if record.name in self.rows:
            raise DuplicateKeyError(record.name)
        return self.seed(record)


class FakeSource:
    """External source answering from a payload table; records every fetch."""

    def __init__(self):
        self.payloads: dict[str, tuple[int, int]] = {}
        self.calls: list[str] = []
        self.error: Exception | None = None
        self.delay = 0.0

    async def fetch(self, key):
        self.calls.append(key)
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if key not in self.payloads:
            return None
        height, weight = self.payloads[key]
        return Record(name=key, height=height, weight=weight)


@pytest.fixture
def fake_cache():
    return FakeCache()


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def fake_source():
    return FakeSource()


@pytest.fixture
def make_pipeline(fake_cache, fake_store, fake_source):
    """Factory: pipeline over the fakes with a chosen policy / single-flight."""
    def _make(
        policy: CacheFailurePolicy = CacheFailurePolicy.DEGRADE,
        single_flight: bool = False,
    ) -> RecordRetrievalPipeline:
        return RecordRetrievalPipeline(
            cache=fake_cache,
            store=fake_store,
            source=fake_source,
            cache_policy=policy,
            single_flight=SingleFlight[LookupResult]() if single_flight else None,
        )
    return _make


@pytest.fixture
def pipeline(make_pipeline):
    return make_pipeline()
