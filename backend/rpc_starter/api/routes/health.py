"""Health & Readiness Probes — liveness and readiness endpoints for process managers.

Invariants:
    - GET /api/health/ always returns 200 if process is up (liveness)
    - GET /api/health/ready returns 503 if the registry is empty or not frozen (readiness)

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from load balancer
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from rpc_starter.api.dependencies import get_app_settings, get_registry
from rpc_starter.config import Settings
from rpc_starter.core.registry import Registry

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check(settings: Settings = Depends(get_app_settings)):
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": settings.app_title,
        "version": settings.app_version,
    }


@router.get("/ready")
async def readiness_check(registry: Registry = Depends(get_registry)):
    """Readiness probe — the registry must be populated and frozen."""
    if not len(registry) or not registry.frozen:
        logger.warning("Readiness check failed: registry not ready")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "reason": "registry_unavailable"},
        )
    return {"status": "ready", "checks": {"procedures": len(registry)}}
