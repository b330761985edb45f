"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, status

from core.models import HealthResponse, ScriptFormat

router = APIRouter()


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Liveness probe",
    description="Simple health check that returns 200 if the service is running.",
)
async def health_check() -> HealthResponse:
    """
    Liveness probe endpoint.

    The service has no external dependencies, so liveness is also readiness.
    """
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version="0.1.0",
        formats=[fmt.value for fmt in ScriptFormat],
    )
