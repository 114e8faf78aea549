"""
Health check endpoints.

Provides liveness and readiness probes. Readiness checks the deck database
when the SQL remote store is in use.
"""

from fastapi import APIRouter, Request, Response, status
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    # Only reported when the SQL deck store is configured
    database: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe; never touches the stores."""
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(request: Request, response: Response) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 if the deck database is configured but unreachable.
    """
    session_factory = getattr(request.app.state, "session_factory", None)
    if session_factory is None:
        return HealthResponse(status="ready")

    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        return HealthResponse(status="ready", database="connected")
    except (SQLAlchemyError, OSError):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="disconnected")
