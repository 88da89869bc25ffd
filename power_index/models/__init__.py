"""Pydantic models and result snapshots for the Power Index engine."""

# Common Models
from power_index.models.common import (
    HealthResponse,
    ErrorResponse,
)

# Enums
from power_index.models.enums import (
    EraMarker,
    HistoricalEra,
    ScoringMode,
    ERA_START_YEARS,
)

# Schema
from power_index.models.schema import (
    SubIndicator,
    Domain,
    Schema,
)

# Records
from power_index.models.records import (
    StateRecord,
    classify_era,
    validate_record,
    ingest_records,
)

# Results
from power_index.models.results import (
    ScoreResult,
    ContributionEntry,
    SensitivityEntry,
    ComparisonResult,
    CohortScores,
)

__all__ = [
    # Common
    "HealthResponse",
    "ErrorResponse",
    # Enums
    "EraMarker",
    "HistoricalEra",
    "ScoringMode",
    "ERA_START_YEARS",
    # Schema
    "SubIndicator",
    "Domain",
    "Schema",
    # Records
    "StateRecord",
    "classify_era",
    "validate_record",
    "ingest_records",
    # Results
    "ScoreResult",
    "ContributionEntry",
    "SensitivityEntry",
    "ComparisonResult",
    "CohortScores",
]
