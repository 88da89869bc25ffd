"""State record models: the entities being scored."""
import math
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from power_index.models.enums import ERA_START_YEARS, EraMarker, HistoricalEra
from power_index.models.schema import Schema
from power_index.scoring.errors import RecordError


class StateRecord(BaseModel):
    """Raw indicator values for one historical state at one point in time.

    ``indicators`` maps sub-indicator key → raw value. Keys may be absent;
    absent keys are scored as 0 and the result is flagged as partial.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, max_length=255)
    year: int = Field(..., ge=0)
    era: EraMarker = EraMarker.AD
    reign_length: Optional[int] = Field(default=None, ge=0)
    indicators: Dict[str, float] = Field(default_factory=dict)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        # Runs before the length check so blank names are rejected
        return v.strip() if isinstance(v, str) else v

    @field_validator("indicators")
    @classmethod
    def finite_values(cls, v: Dict[str, float]) -> Dict[str, float]:
        for key, value in v.items():
            if not math.isfinite(value):
                raise ValueError(f"indicator {key!r} must be a finite number")
        return v

    @property
    def signed_year(self) -> int:
        """Year on a single axis; BC years are negative."""
        return -self.year if self.era == EraMarker.BC else self.year

    @property
    def historical_era(self) -> HistoricalEra:
        return classify_era(self.signed_year)

    @property
    def label(self) -> str:
        return f"{self.name} ({self.year} {self.era.value})"


def classify_era(signed_year: int) -> HistoricalEra:
    """Map a signed year onto its comparison era."""
    era = HistoricalEra.ANCIENT
    for candidate, start in ERA_START_YEARS.items():
        if signed_year >= start:
            era = candidate
    return era


def validate_record(schema: Schema, record: StateRecord) -> StateRecord:
    """Reject records carrying indicator keys the schema does not define.

    Raises:
        RecordError: If any key of ``record.indicators`` is unknown.
    """
    known = set(schema.indicator_keys)
    unknown = sorted(k for k in record.indicators if k not in known)
    if unknown:
        raise RecordError(
            f"Record {record.name!r} has unknown indicator keys: {', '.join(unknown)}",
            unknown_keys=tuple(unknown),
        )
    return record


def ingest_records(schema: Schema, payloads: Iterable[dict]) -> List[StateRecord]:
    """Build and schema-check StateRecords from plain dicts."""
    return [validate_record(schema, StateRecord.model_validate(p)) for p in payloads]
