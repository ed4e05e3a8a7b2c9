"""
Health check endpoints.
"""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends

from detail_composite.api.deps import get_dataverse_client
from detail_composite.clients.dataverse_client import DataverseClient
from detail_composite.core.config import settings

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """
    Basic health check endpoint.
    Returns application status.
    """
    return {
        "status": "healthy",
        "app": settings.app_name,
        "environment": settings.app_env,
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/health/ready")
async def readiness_check(
    client: DataverseClient = Depends(get_dataverse_client),
) -> dict[str, Any]:
    """
    Readiness check endpoint.
    Verifies the Dataverse Web API answers.
    """
    checks = {
        "app": True,
        "dataverse": await client.health_check(),
    }

    all_healthy = all(checks.values())

    return {
        "status": "ready" if all_healthy else "not_ready",
        "checks": checks,
        "timestamp": datetime.utcnow().isoformat(),
    }


@router.get("/health/live")
async def liveness_check() -> dict[str, str]:
    """
    Liveness check endpoint.
    Simple check that the application is running.
    """
    return {"status": "alive"}
