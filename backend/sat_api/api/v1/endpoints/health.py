"""Health and readiness endpoints."""

from typing import Literal

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from sat_api.core.errors import get_request_id
from sat_api.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["ok"] = "ok"


class ReadinessCheck(BaseModel):
    """Individual readiness check result."""

    status: Literal["ok", "degraded", "down"]
    message: str | None = None


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    status: Literal["ok", "degraded", "down"]
    checks: dict[str, ReadinessCheck]
    request_id: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Simple health check endpoint. Returns 200 if the API is running.",
)
async def health_check() -> HealthResponse:
    """Health check endpoint - just checks if the process is alive."""
    return HealthResponse(status="ok")


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description=(
        "Verifies database connectivity (required) and bucket reachability (degraded only)."
    ),
)
async def readiness_check(request: Request) -> JSONResponse:
    checks: dict[str, ReadinessCheck] = {}

    try:
        await run_in_threadpool(request.app.state.database.ping)
        checks["database"] = ReadinessCheck(status="ok")
    except Exception as e:
        logger.warning("readiness_database_down", extra={"event": "readiness_database_down", "error": str(e)})
        checks["database"] = ReadinessCheck(status="down", message=str(e))

    storage = request.app.state.storage
    ping = getattr(storage, "ping", None)
    if ping is not None:
        try:
            await run_in_threadpool(ping)
            checks["object_storage"] = ReadinessCheck(status="ok")
        except Exception as e:
            logger.warning(
                "readiness_storage_degraded",
                extra={"event": "readiness_storage_degraded", "error": str(e)},
            )
            checks["object_storage"] = ReadinessCheck(status="degraded", message=str(e))

    if checks["database"].status == "down":
        overall = "down"
    elif any(check.status != "ok" for check in checks.values()):
        overall = "degraded"
    else:
        overall = "ok"

    body = ReadinessResponse(status=overall, checks=checks, request_id=get_request_id(request))
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE if overall == "down" else status.HTTP_200_OK,
        content=body.model_dump(),
    )
