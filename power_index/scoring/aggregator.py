"""Aggregator: normalized sub-indicators → domain scores → composite index.

  domain_score(d) = Σ_i ( normalized_i × w_i ) × W_d
  composite       = Σ_d domain_score(d)

Canonical mode uses the schema weights W_d (they sum to 1, so the composite
is bounded in [0, 1]). Exploratory mode takes explicit per-domain weight
overrides for "what if priorities differed" recomputation; the overrides are
not required to sum to 1 and the maximum achievable composite is their sum.

Missing indicators contribute a normalized value of 0. They are listed in
``ScoreResult.missing_indicators`` and the result reports ``is_partial``.
"""
from decimal import Decimal
from typing import Dict, Mapping, Optional, Tuple

import structlog

from power_index.models.enums import ScoringMode
from power_index.models.records import StateRecord
from power_index.models.results import ScoreResult
from power_index.models.schema import Domain, Schema
from power_index.scoring.errors import SchemaError
from power_index.scoring.utils import ONE, ZERO, to_decimal

logger = structlog.get_logger(__name__)


class Aggregator:
    """Weighted hierarchical aggregation for one schema.

    The schema is the only state; every public method is a pure function of
    its arguments.
    """

    def __init__(self, schema: Schema) -> None:
        self.schema = schema

    # ── weights ───────────────────────────────────────────────────────────────

    def resolve_weights(
        self,
        weight_overrides: Optional[Mapping[str, float]] = None,
    ) -> Tuple[Dict[str, Decimal], ScoringMode]:
        """Domain weights to aggregate with, and the resulting mode.

        Args:
            weight_overrides: Domain name → weight in [0, 1]. Must name every
                schema domain and nothing else. ``None`` selects the
                canonical schema weights.

        Raises:
            SchemaError: Unknown or missing domains, or a weight outside [0, 1].
        """
        if weight_overrides is None:
            return (
                {d.name: to_decimal(d.weight) for d in self.schema.domains},
                ScoringMode.CANONICAL,
            )

        names = self.schema.domain_names
        unknown = sorted(set(weight_overrides) - set(names))
        if unknown:
            raise SchemaError(f"Weight override names unknown domains: {', '.join(unknown)}")
        missing = [n for n in names if n not in weight_overrides]
        if missing:
            raise SchemaError(f"Weight override is missing domains: {', '.join(missing)}")

        weights: Dict[str, Decimal] = {}
        for name in names:
            w = to_decimal(weight_overrides[name])
            if w < ZERO or w > ONE:
                raise SchemaError(f"Override weight of {name!r} must be in [0, 1], got {w}")
            weights[name] = w
        return weights, ScoringMode.EXPLORATORY

    # ── scores ────────────────────────────────────────────────────────────────

    @staticmethod
    def domain_score(
        domain: Domain,
        normalized: Mapping[str, Decimal],
        weight: Optional[Decimal] = None,
    ) -> Decimal:
        """Score of one domain, bounded in [0, weight].

        Args:
            domain: Domain definition.
            normalized: Indicator key → normalized value; absent keys count as 0.
            weight: Domain weight to apply (default: the schema weight).
        """
        inner = sum(
            (normalized.get(s.key, ZERO) * to_decimal(s.weight) for s in domain.sub_indicators),
            ZERO,
        )
        w = to_decimal(domain.weight) if weight is None else weight
        return inner * w

    @staticmethod
    def composite_index(domain_scores: Mapping[str, Decimal]) -> Decimal:
        return sum(domain_scores.values(), ZERO)

    def score_values(
        self,
        normalized: Mapping[str, Decimal],
        weights: Mapping[str, Decimal],
    ) -> Tuple[Dict[str, Decimal], Decimal]:
        """Domain scores (schema order) and composite for resolved weights."""
        domain_scores = {
            d.name: self.domain_score(d, normalized, weights[d.name])
            for d in self.schema.domains
        }
        return domain_scores, self.composite_index(domain_scores)

    def aggregate(
        self,
        record: StateRecord,
        normalized: Mapping[str, Decimal],
        weight_overrides: Optional[Mapping[str, float]] = None,
    ) -> ScoreResult:
        """Build a ScoreResult for one record.

        Args:
            record: The scored record (identity and temporal marker).
            normalized: Indicator key → normalized value for present keys.
            weight_overrides: Optional exploratory domain weights.

        Returns:
            Fresh, self-describing ScoreResult.
        """
        weights, mode = self.resolve_weights(weight_overrides)
        domain_scores, composite = self.score_values(normalized, weights)
        missing = tuple(k for k in self.schema.indicator_keys if k not in normalized)

        result = ScoreResult(
            entity=record.name,
            year=record.year,
            era=record.era.value,
            period=record.historical_era.value,
            schema_name=self.schema.name,
            schema_fingerprint=self.schema.fingerprint,
            mode=mode,
            domain_scores=domain_scores,
            composite_index=composite,
            max_possible_score=sum(weights.values(), ZERO),
            domain_weights=dict(weights),
            indicator_values={
                k: normalized[k] for k in self.schema.indicator_keys if k in normalized
            },
            missing_indicators=missing,
        )

        if result.is_partial:
            logger.warning(
                "partial_score",
                entity=result.entity,
                missing=len(missing),
            )
        logger.info(
            "score_calculated",
            entity=result.entity,
            mode=mode.value,
            composite_index=float(composite),
            max_possible_score=float(result.max_possible_score),
        )
        return result
