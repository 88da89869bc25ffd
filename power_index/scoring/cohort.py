"""Cohort scoring: era grouping, batch scoring and percentile ranks.

Pipeline per cohort
-------------------
1. Derive the NormalizationBasis over every record     → Normalizer.derive_basis
2. Normalize each valid record                         → Normalizer.normalize_record
3. Aggregate into domain scores + composite            → Aggregator.aggregate
4. Attach each entity's percentile rank in the cohort  → percentile_rank

Records rejected during basis derivation are reported in
``CohortScores.excluded`` and receive no score; one malformed record never
aborts the cohort.
"""
from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional

import structlog

from power_index.models.enums import HistoricalEra
from power_index.models.records import StateRecord
from power_index.models.results import CohortScores, ScoreResult
from power_index.models.schema import Schema
from power_index.scoring.aggregator import Aggregator
from power_index.scoring.normalizer import (
    DEFAULT_PERCENTILE_CAP,
    NormalizationBasis,
    Normalizer,
    NormalizerConfig,
)
from power_index.scoring.errors import RecordError
from power_index.scoring.utils import percentile_rank

logger = structlog.get_logger(__name__)


def group_by_era(records: Iterable[StateRecord]) -> Dict[HistoricalEra, List[StateRecord]]:
    """Split records into era cohorts, preserving input order within each."""
    groups: Dict[HistoricalEra, List[StateRecord]] = defaultdict(list)
    for record in records:
        groups[record.historical_era].append(record)
    return dict(groups)


class CohortScorer:
    """Score every record of one comparison cohort.

    Parameters
    ----------
    schema:
        Validated schema (see ``SchemaRegistry``).
    config:
        Normalization flags; defaults to linear scaling.
    percentile_cap:
        Percentile of each indicator's cohort distribution used as its
        normalization ceiling (default 97.5).
    """

    def __init__(
        self,
        schema: Schema,
        config: Optional[NormalizerConfig] = None,
        percentile_cap: float = float(DEFAULT_PERCENTILE_CAP),
    ) -> None:
        self.schema = schema
        self.normalizer = Normalizer(schema, config)
        self.aggregator = Aggregator(schema)
        self.percentile_cap = percentile_cap

    def derive_basis(self, records: Iterable[StateRecord]) -> NormalizationBasis:
        return self.normalizer.derive_basis(records, self.percentile_cap)

    def score_one(
        self,
        record: StateRecord,
        basis: NormalizationBasis,
        weight_overrides: Optional[Mapping[str, float]] = None,
    ) -> ScoreResult:
        """Normalize and aggregate a single record against a fixed basis."""
        values, _ = self.normalizer.normalize_record(record, basis)
        return self.aggregator.aggregate(record, values, weight_overrides)

    def score(
        self,
        records: Iterable[StateRecord],
        weight_overrides: Optional[Mapping[str, float]] = None,
    ) -> CohortScores:
        """Score a whole cohort.

        Args:
            records: Every record of the cohort.
            weight_overrides: Optional exploratory domain weights.

        Returns:
            CohortScores with results in input order (percentile ranks
            attached) and excluded entities with their reasons.

        Raises:
            RecordError: Two records share a name.
            SchemaError: Invalid ``weight_overrides``.
        """
        cohort = list(records)
        names = [r.name for r in cohort]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise RecordError(f"Duplicate entity names in cohort: {', '.join(duplicates)}")
        # Override structure is checked before any work is done
        self.aggregator.resolve_weights(weight_overrides)
        basis = self.derive_basis(cohort)

        scored: List[ScoreResult] = [
            self.score_one(r, basis, weight_overrides)
            for r in cohort
            if r.name not in basis.excluded
        ]
        composites = [r.composite_index for r in scored]
        ranked = tuple(
            r.with_percentile(percentile_rank(r.composite_index, composites)) for r in scored
        )

        logger.info(
            "cohort_scored",
            scored=len(ranked),
            excluded=len(basis.excluded),
            partial=sum(1 for r in ranked if r.is_partial),
        )
        return CohortScores(results=ranked, excluded=dict(basis.excluded))
