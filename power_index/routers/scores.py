"""Cohort scoring, comparison and sensitivity endpoints."""
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from power_index.config import get_settings
from power_index.models import (
    CohortScores,
    ErrorResponse,
    ScoreResult,
    StateRecord,
    validate_record,
)
from power_index.routers.dependencies import get_schema
from power_index.scoring.cohort import CohortScorer
from power_index.scoring.comparator import Comparator
from power_index.scoring.contribution import ContributionAnalyzer
from power_index.scoring.errors import ComparisonError, RecordError, SchemaError
from power_index.scoring.normalizer import NormalizerConfig

# ── request / response schema ─────────────────────────────────────────────────


class CohortScoreRequest(BaseModel):
    """One era cohort plus optional normalization and what-if settings."""

    records: list[StateRecord] = Field(..., min_length=1)
    percentile_cap: Optional[float] = Field(default=None, gt=0, le=100)
    use_log_scale: Optional[bool] = None
    weight_overrides: Optional[dict[str, float]] = Field(
        default=None,
        description="Domain name → weight (0-1) for exploratory scoring",
    )


class CompareRequest(CohortScoreRequest):
    entity_a: str
    entity_b: str


class SensitivityRequest(CohortScoreRequest):
    entity: str
    delta: Optional[float] = Field(default=None, gt=0, le=1)


class CohortScoreResponse(BaseModel):
    results: list[dict[str, Any]]
    excluded: dict[str, str]
    contributions: dict[str, list[dict[str, Any]]]


class CompareResponse(BaseModel):
    entity_a: dict[str, Any]
    entity_b: dict[str, Any]
    comparison: dict[str, Any]


class SensitivityResponse(BaseModel):
    entity: str
    composite_index: float
    sensitivity: list[dict[str, Any]]


# ── helpers ──────────────────────────────────────────────────────────────────


def _score(request: CohortScoreRequest) -> CohortScores:
    settings = get_settings()
    schema = get_schema()
    config = NormalizerConfig.from_settings(settings)
    if request.use_log_scale is not None:
        config = NormalizerConfig(
            use_log_scale=request.use_log_scale,
            log_scale_keys=config.log_scale_keys,
        )
    scorer = CohortScorer(
        schema,
        config=config,
        percentile_cap=request.percentile_cap or settings.percentile_cap,
    )
    try:
        for record in request.records:
            validate_record(schema, record)
        return scorer.score(request.records, request.weight_overrides)
    except (RecordError, SchemaError) as exc:
        raise HTTPException(status_code=422, detail=str(exc))


def _find(scores: CohortScores, entity: str) -> ScoreResult:
    if entity in scores.excluded:
        raise HTTPException(
            status_code=422,
            detail=f"Entity {entity!r} was excluded: {scores.excluded[entity]}",
        )
    try:
        return scores.get(entity)
    except KeyError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Entity {entity!r} not found in cohort",
        )


router = APIRouter(prefix="/api/v1/scores", tags=["PPI Scoring"])

_ERRORS = {
    404: {"model": ErrorResponse, "description": "Entity not in cohort"},
    422: {"model": ErrorResponse, "description": "Invalid record, cohort or weights"},
}


@router.post(
    "/cohort",
    response_model=CohortScoreResponse,
    responses=_ERRORS,
    summary="Score an Era Cohort",
)
async def score_cohort(request: CohortScoreRequest):
    """Normalize a cohort against its own percentile-capped basis and score
    every valid record. Invalid records are listed under ``excluded``."""
    scores = _score(request)
    analyzer = ContributionAnalyzer(get_schema())
    return CohortScoreResponse(
        results=[r.to_dict() for r in scores.results],
        excluded=scores.excluded,
        contributions={
            r.entity: [e.to_dict() for e in analyzer.analyze(r)] for r in scores.results
        },
    )


@router.post(
    "/compare",
    response_model=CompareResponse,
    responses={**_ERRORS, 409: {"model": ErrorResponse, "description": "Schemas differ"}},
    summary="Compare Two Entities",
)
async def compare_entities(request: CompareRequest):
    """Score the cohort, then report which domain each entity leads."""
    scores = _score(request)
    a = _find(scores, request.entity_a)
    b = _find(scores, request.entity_b)
    try:
        comparison = Comparator().compare(a, b)
    except ComparisonError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return CompareResponse(
        entity_a=a.to_dict(),
        entity_b=b.to_dict(),
        comparison=comparison.to_dict(),
    )


@router.post(
    "/sensitivity",
    response_model=SensitivityResponse,
    responses=_ERRORS,
    summary="Domain Weight Sensitivity",
)
async def weight_sensitivity(request: SensitivityRequest):
    """What-if composites for one entity with each domain weight moved by ±delta."""
    scores = _score(request)
    result = _find(scores, request.entity)
    delta = request.delta or get_settings().sensitivity_delta
    entries = ContributionAnalyzer(get_schema()).sensitivity(result, delta)
    return SensitivityResponse(
        entity=result.entity,
        composite_index=float(result.composite_index),
        sensitivity=[e.to_dict() for e in entries],
    )
