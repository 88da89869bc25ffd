"""Scoring result snapshots.

Results are frozen dataclasses holding Decimal values, with ``to_dict()``
producing plain-Python floats for logging, API responses and export
collaborators. A ``ScoreResult`` carries the weights it was computed with
so that downstream consumers never need to re-run the engine.
"""
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Dict, Optional, Tuple

from power_index.models.enums import ScoringMode

_HUNDRED = Decimal(100)


@dataclass(frozen=True)
class ScoreResult:
    """Per-entity scoring output."""

    entity: str
    year: int
    era: str                                  # BC / AD marker
    period: str                               # HistoricalEra value
    schema_name: str
    schema_fingerprint: str
    mode: ScoringMode
    domain_scores: Dict[str, Decimal]        # domain → score in [0, domain weight]
    composite_index: Decimal                  # Σ domain scores
    max_possible_score: Decimal               # Σ domain weights used
    domain_weights: Dict[str, Decimal]        # domain → weight used
    indicator_values: Dict[str, Decimal]      # indicator key → normalized value
    missing_indicators: Tuple[str, ...] = ()
    percentile_rank: Optional[Decimal] = None

    @property
    def is_partial(self) -> bool:
        """True when any schema indicator was absent from the record."""
        return bool(self.missing_indicators)

    @property
    def ppi(self) -> Decimal:
        """Composite index on the 0–100 scale."""
        return self.composite_index * _HUNDRED

    @property
    def attainment(self) -> Decimal:
        """Composite index relative to the maximum achievable score."""
        if self.max_possible_score <= 0:
            return Decimal(0)
        return self.composite_index / self.max_possible_score

    def with_percentile(self, rank: Decimal) -> "ScoreResult":
        """Return a copy of this snapshot carrying a cohort percentile rank."""
        return replace(self, percentile_rank=rank)

    def to_dict(self) -> dict:
        return {
            "entity": self.entity,
            "year": self.year,
            "era": self.era,
            "period": self.period,
            "schema_name": self.schema_name,
            "schema_fingerprint": self.schema_fingerprint,
            "mode": self.mode.value,
            "composite_index": float(self.composite_index),
            "ppi": float(self.ppi),
            "max_possible_score": float(self.max_possible_score),
            "domain_scores": {k: float(v) for k, v in self.domain_scores.items()},
            "domain_weights": {k: float(v) for k, v in self.domain_weights.items()},
            "indicator_values": {k: float(v) for k, v in self.indicator_values.items()},
            "missing_indicators": list(self.missing_indicators),
            "is_partial": self.is_partial,
            "percentile_rank": (
                float(self.percentile_rank) if self.percentile_rank is not None else None
            ),
        }


@dataclass(frozen=True)
class ContributionEntry:
    """One domain's share of a composite index."""

    domain: str
    contribution: Decimal
    percentage: Decimal   # of composite index, 0–100
    rank: int

    def to_dict(self) -> dict:
        return {
            "domain": self.domain,
            "contribution": float(self.contribution),
            "percentage": float(self.percentage),
            "rank": self.rank,
        }


@dataclass(frozen=True)
class SensitivityEntry:
    """What-if response of the composite index to one domain's weight."""

    domain: str
    weight: Decimal
    attainment: Decimal          # weighted indicator average, 0–1
    composite_if_raised: Decimal
    composite_if_lowered: Decimal

    @property
    def swing(self) -> Decimal:
        return self.composite_if_raised - self.composite_if_lowered

    def to_dict(self) -> dict:
        return {
            "domain": self.domain,
            "weight": float(self.weight),
            "attainment": float(self.attainment),
            "composite_if_raised": float(self.composite_if_raised),
            "composite_if_lowered": float(self.composite_if_lowered),
            "swing": float(self.swing),
        }


@dataclass(frozen=True)
class ComparisonResult:
    """Pairwise domain comparison of two entities scored under one schema."""

    entity_a: str
    entity_b: str
    differences: Dict[str, Decimal]   # domain → score_a − score_b
    a_lead: Optional[str]
    a_margin: Decimal
    b_lead: Optional[str]
    b_margin: Decimal

    @property
    def insight(self) -> str:
        """Human-readable summary of which dimension each side leads."""
        parts = []
        if self.a_lead is not None:
            parts.append(f"{self.entity_a} leads in {self.a_lead}")
        if self.b_lead is not None:
            parts.append(f"{self.entity_b} leads in {self.b_lead}")
        if not parts:
            return f"{self.entity_a} and {self.entity_b} are level in every domain"
        return "; ".join(parts)

    def to_dict(self) -> dict:
        return {
            "entity_a": self.entity_a,
            "entity_b": self.entity_b,
            "differences": {k: float(v) for k, v in self.differences.items()},
            "a_lead": self.a_lead,
            "a_margin": float(self.a_margin),
            "b_lead": self.b_lead,
            "b_margin": float(self.b_margin),
            "insight": self.insight,
        }


@dataclass(frozen=True)
class CohortScores:
    """Scores for every valid record of one cohort plus excluded entities."""

    results: Tuple[ScoreResult, ...]
    excluded: Dict[str, str] = field(default_factory=dict)   # entity → reason

    def get(self, entity: str) -> ScoreResult:
        for r in self.results:
            if r.entity == entity:
                return r
        raise KeyError(entity)

    def to_dict(self) -> dict:
        return {
            "results": [r.to_dict() for r in self.results],
            "excluded": dict(self.excluded),
        }
