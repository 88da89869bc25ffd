"""Schema inspection endpoint."""
from fastapi import APIRouter

from power_index.routers.dependencies import get_schema

router = APIRouter(prefix="/api/v1/schema", tags=["Schema"])


@router.get(
    "",
    summary="Active Scoring Schema",
    description="Domains, sub-indicators, weights and units of the active schema.",
)
async def read_schema():
    schema = get_schema()
    return {
        **schema.model_dump(mode="json"),
        "fingerprint": schema.fingerprint,
        "indicator_count": len(schema.indicator_keys),
    }
