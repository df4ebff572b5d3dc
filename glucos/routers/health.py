"""Health checks.

``/health`` reports snapshot database and reading generator state for
load balancers; ``/health/live`` only proves the process is serving.
"""

from typing import Any

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse

from glucos.config import settings
from glucos.database import check_database_connection

router = APIRouter(tags=["Health"])


async def database_status() -> str:
    """'connected', 'disconnected', or 'disabled' when persistence is off."""
    if not settings.persistence_enabled:
        return "disabled"
    return "connected" if await check_database_connection() else "disconnected"


def generator_status(request: Request) -> str:
    monitor = getattr(request.app.state, "monitor", None)
    if monitor is None:
        return "unavailable"
    return "running" if monitor.is_running else "stopped"


@router.get(
    "/health",
    responses={
        200: {"description": "Service healthy"},
        503: {"description": "Snapshot database unreachable"},
    },
)
async def health_check(request: Request) -> JSONResponse:
    """Report database and generator state.

    A stopped generator is healthy; only an unreachable database degrades
    the service, since snapshots could no longer be saved.
    """
    database = await database_status()
    degraded = database == "disconnected"
    return JSONResponse(
        status_code=(
            status.HTTP_503_SERVICE_UNAVAILABLE if degraded else status.HTTP_200_OK
        ),
        content={
            "status": "degraded" if degraded else "healthy",
            "database": database,
            "generator": generator_status(request),
        },
    )


@router.get("/health/live")
async def liveness_check() -> dict[str, Any]:
    """Liveness check; never touches the database."""
    return {"status": "alive"}
