"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if any tier probe fails (readiness)

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from load balancer
    - The external source is not probed: its outages are per-lookup 503s, not unreadiness
"""

import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.api.dependencies import get_health_probes

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/health", tags=["health"])

SERVICE_NAME = "pokecache-api"
SERVICE_VERSION = "1.0.0"


@router.get("", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
    }


@router.get("/ready")
async def readiness_check(probes: dict = Depends(get_health_probes)):
    """Readiness probe — record store and cache connectivity."""
    checks = {}
    for name, probe in probes.items():
        checks[name] = "healthy" if await probe() else "unavailable"
    failing = [name for name, state in checks.items() if state != "healthy"]
    if failing:
        logger.warning(f"Readiness failed: {', '.join(failing)}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": checks},
        )
    return {"status": "ready", "checks": checks}
