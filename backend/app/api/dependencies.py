"""Route Dependencies — hand the lifespan-built components to route handlers.

Invariants:
    - Components live on app.state, built once per process in main.lifespan
    - Missing component → RuntimeError (app started without lifespan)

Design Decisions:
    - Depends() providers over module globals: tests swap them via dependency_overrides
"""

from fastapi import Request

from app.services.retrieval_pipeline import RecordRetrievalPipeline


def get_pipeline(request: Request) -> RecordRetrievalPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise RuntimeError("Retrieval pipeline not initialized")
    return pipeline


def get_health_probes(request: Request) -> dict:
    """Named async health callables, e.g. {"database": db.health_check}."""
    return getattr(request.app.state, "health_probes", {})
