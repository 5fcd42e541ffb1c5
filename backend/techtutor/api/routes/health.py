"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if the state store is unreachable (readiness)

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from load balancer
"""

import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from techtutor.api.dependencies import get_store
from techtutor.infrastructure.state_store import StateStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "techtutor-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(store: StateStore = Depends(get_store)):
    """Readiness probe — includes state store connectivity."""
    store_ok = await store.health_check()
    if not store_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "store_unavailable",
                "backend": store.backend,
            },
        )
    return {"status": "ready", "checks": {"store": "healthy", "backend": store.backend}}
