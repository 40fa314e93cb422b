"""PokeCache API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map PokeCacheError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Every tier client is built in the lifespan, injected into the pipeline,
      and closed on shutdown (no process-wide singletons)

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Schema bootstrap is idempotent and optional (database_auto_create);
      production deployments run alembic instead
"""

import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.error_handlers import register_error_handlers
from app.api.routes import health, records, summary
from app.config import Settings, get_settings
from app.core.domain_types import LookupResult
from app.infrastructure.database import DatabaseSessionManager
from app.infrastructure.observability import setup_logging
from app.infrastructure.pokeapi_client import PokeApiClient
from app.infrastructure.record_store import SqlRecordStore
from app.infrastructure.redis_cache import RedisRecordCache
from app.services.retrieval_pipeline import RecordRetrievalPipeline
from app.services.single_flight import SingleFlight

logger = logging.getLogger(__name__)


def build_pipeline(
    settings: Settings,
    db: DatabaseSessionManager,
    cache: RedisRecordCache,
    source: PokeApiClient,
) -> RecordRetrievalPipeline:
    """Wire the three tiers into a pipeline according to settings."""
    single_flight = (
        SingleFlight[LookupResult]() if settings.single_flight_enabled else None
    )
    return RecordRetrievalPipeline(
        cache=cache,
        store=SqlRecordStore(db),
        source=source,
        cache_policy=settings.cache_failure_policy,
        single_flight=single_flight,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)

    db = DatabaseSessionManager(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    cache = RedisRecordCache.from_url(
        settings.redis_url,
        prefix=settings.cache_key_prefix,
        ttl_seconds=settings.cache_ttl_seconds,
        socket_timeout=settings.cache_socket_timeout_seconds,
    )
    source = PokeApiClient(
        httpx.AsyncClient(timeout=settings.external_timeout_seconds),
        url_template=settings.external_source_url_template,
        max_retries=settings.external_max_retries,
        base_delay_ms=settings.external_base_delay_ms,
        max_delay_ms=settings.external_max_delay_ms,
    )
    pipeline = build_pipeline(settings, db, cache, source)

    if settings.database_auto_create:
        try:
            await pipeline.store.initialize()
        except Exception as e:
            # Lookups will surface StoreUnavailableError until the store recovers
            logger.error(f"Record store initialization failed: {e}", exc_info=True)

    app.state.pipeline = pipeline
    app.state.health_probes = {
        "database": db.health_check,
        "cache": cache.health_check,
    }
    logger.info(
        "PokeCache API started",
        extra={"policy": settings.cache_failure_policy.value},
    )
    yield
    logger.info("PokeCache API shutting down")
    await source.close()
    await cache.close()
    await db.dispose()


app = FastAPI(
    title="PokeCache API", version="1.0.0", lifespan=lifespan,
)

# CORS: configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes: explicit registration
app.include_router(health.router)
app.include_router(records.router)
app.include_router(summary.router)

register_error_handlers(app)


@app.get("/", include_in_schema=False)
async def root():
    return "PokeCache API is running!"
