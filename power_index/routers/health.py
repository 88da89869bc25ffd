"""Health check endpoint."""
from datetime import datetime, timezone

from fastapi import APIRouter

from power_index.config import get_settings
from power_index.models import HealthResponse
from power_index.routers.dependencies import get_schema

router = APIRouter(tags=["Health"])


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check the API is up and the scoring schema is loaded."
)
async def health_check():
    settings = get_settings()
    schema = get_schema()
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=settings.app_version,
        schema_name=schema.name,
        schema_fingerprint=schema.fingerprint,
    )
