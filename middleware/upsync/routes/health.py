"""
Health Check Endpoints

Provides liveness and readiness status for the bridge.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from upsync.config import Settings, get_settings
from upsync.dependencies import get_pocketsmith_service, get_up_service
from upsync.services.pocketsmith_service import PocketSmithService
from upsync.services.up_service import UpService
from upsync.utils.exceptions import BridgeException
from upsync.utils.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """
    Basic health check endpoint.
    Returns 200 if application is running.
    """
    return JSONResponse(
        status_code=200,
        content={
            "status": "healthy",
            "timestamp": _now(),
            "version": settings.app_version,
        },
    )


@router.get("/health/ready")
async def readiness_check(
    settings: Settings = Depends(get_settings),
    up_service: UpService = Depends(get_up_service),
    pocketsmith_service: PocketSmithService = Depends(get_pocketsmith_service),
):
    """
    Readiness check endpoint.
    Verifies both APIs accept the configured credentials and that the
    account mapping table is not empty.
    """
    dependencies: Dict[str, Any] = {}

    try:
        await up_service.ping()
        dependencies["up_api"] = {"status": "healthy"}
    except BridgeException as e:
        dependencies["up_api"] = {"status": "unhealthy", "error": e.message}

    try:
        await pocketsmith_service.get_current_user()
        dependencies["pocketsmith_api"] = {"status": "healthy"}
    except BridgeException as e:
        dependencies["pocketsmith_api"] = {"status": "unhealthy", "error": e.message}

    dependencies["account_mappings"] = {
        "status": "healthy" if settings.account_mappings else "unhealthy",
        "mapped_accounts": len(settings.account_mappings),
    }

    overall_healthy = all(
        dependency["status"] == "healthy" for dependency in dependencies.values()
    )
    if not overall_healthy:
        logger.warning("Readiness check failed", extra={"dependencies": dependencies})

    return JSONResponse(
        status_code=200 if overall_healthy else 503,
        content={
            "status": "ready" if overall_healthy else "not_ready",
            "timestamp": _now(),
            "dependencies": dependencies,
        },
    )


@router.get("/health/live")
async def liveness_check():
    """
    Liveness check endpoint.
    Returns 200 if application is alive.
    """
    return JSONResponse(
        status_code=200,
        content={
            "status": "alive",
            "timestamp": _now(),
        },
    )
