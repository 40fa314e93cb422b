"""API test fixtures — FastAPI app with the pipeline dependency overridden.

Invariants:
    - Lifespan never runs: no engine, Redis client, or httpx client is created
    - get_pipeline resolves to a pipeline over the in-memory fakes

Design Decisions:
    - httpx ASGITransport: real routing, handlers, and serialization without a server
"""

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.dependencies import get_health_probes, get_pipeline
from app.main import app


@pytest.fixture
def probes():
    """Mutable readiness probe results keyed by tier name."""
    return {"database": True, "cache": True}


@pytest.fixture
async def client(pipeline, probes):
    def probe_for(name):
        async def _probe():
            return probes[name]
        return _probe

    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_health_probes] = lambda: {
        name: probe_for(name) for name in probes
    }
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()
