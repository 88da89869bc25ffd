"""Contribution Analyzer: attribute a composite index to its domains.

  contribution(d) = domain_score(d)
  percentage(d)   = contribution(d) / composite × 100     (0 when composite == 0)

Ranking is by contribution descending; ties keep schema declaration order.

Sensitivity analysis re-runs the Aggregator in exploratory mode with one
domain weight moved by ±delta (clamped to [0, 1]) and reports the composite
under each perturbation.
"""
from decimal import Decimal
from typing import List

import structlog

from power_index.models.results import ContributionEntry, ScoreResult, SensitivityEntry
from power_index.models.schema import Schema
from power_index.scoring.aggregator import Aggregator
from power_index.scoring.errors import ComparisonError
from power_index.scoring.utils import HUNDRED, ZERO, clamp, safe_ratio, to_decimal

logger = structlog.get_logger(__name__)

DEFAULT_SENSITIVITY_DELTA: float = 0.05


class ContributionAnalyzer:
    """Decompose ScoreResults into ranked domain contributions."""

    def __init__(self, schema: Schema) -> None:
        self.schema = schema
        self.aggregator = Aggregator(schema)

    def _check(self, result: ScoreResult) -> None:
        if result.schema_fingerprint != self.schema.fingerprint:
            raise ComparisonError(
                f"{result.entity!r} was scored under schema "
                f"{result.schema_name} ({result.schema_fingerprint}), "
                f"not {self.schema.name} ({self.schema.fingerprint})"
            )

    def analyze(self, result: ScoreResult) -> List[ContributionEntry]:
        """Ranked contribution breakdown of ``result``."""
        composite = result.composite_index
        ordered = sorted(
            enumerate(result.domain_scores.items()),
            key=lambda item: (-item[1][1], item[0]),
        )
        entries = [
            ContributionEntry(
                domain=domain,
                contribution=score,
                percentage=safe_ratio(score, composite) * HUNDRED,
                rank=rank,
            )
            for rank, (_, (domain, score)) in enumerate(ordered, start=1)
        ]
        logger.info(
            "contributions_analyzed",
            entity=result.entity,
            top_domain=entries[0].domain if entries else None,
        )
        return entries

    def sensitivity(
        self,
        result: ScoreResult,
        delta: float = DEFAULT_SENSITIVITY_DELTA,
    ) -> List[SensitivityEntry]:
        """What-if composites with each domain weight moved by ±delta.

        The other domains keep the weights ``result`` was scored with.

        Raises:
            ComparisonError: ``result`` belongs to a different schema.
            ValueError: ``delta`` is not in (0, 1].
        """
        self._check(result)
        step = to_decimal(delta)
        if step <= ZERO or step > Decimal(1):
            raise ValueError(f"delta must be in (0, 1], got {delta}")

        base = dict(result.domain_weights)
        entries: List[SensitivityEntry] = []
        for domain in self.schema.domains:
            weight = base[domain.name]
            raised = dict(base, **{domain.name: clamp(weight + step)})
            lowered = dict(base, **{domain.name: clamp(weight - step)})
            _, composite_up = self.aggregator.score_values(result.indicator_values, raised)
            _, composite_down = self.aggregator.score_values(result.indicator_values, lowered)
            entries.append(
                SensitivityEntry(
                    domain=domain.name,
                    weight=weight,
                    attainment=self.aggregator.domain_score(
                        domain, result.indicator_values, Decimal(1)
                    ),
                    composite_if_raised=composite_up,
                    composite_if_lowered=composite_down,
                )
            )
        logger.info("sensitivity_analyzed", entity=result.entity, delta=float(step))
        return entries
