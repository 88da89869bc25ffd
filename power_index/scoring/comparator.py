"""Comparator: pairwise domain comparison of two ScoreResults.

  diff(d) = score_A(d) − score_B(d)

A leads in the domain with the largest positive diff, B in the domain with
the most negative diff. Ties keep the first domain in schema order. The
comparison never ranks the entities overall; it only names the dimension
each one leads.
"""
from decimal import Decimal
from typing import Dict, Optional

import structlog

from power_index.models.results import ComparisonResult, ScoreResult
from power_index.scoring.errors import ComparisonError
from power_index.scoring.utils import ZERO

logger = structlog.get_logger(__name__)


class Comparator:
    """Compare two results computed under the same schema."""

    def compare(self, a: ScoreResult, b: ScoreResult) -> ComparisonResult:
        """Per-domain differences and the leading domain of each side.

        Raises:
            ComparisonError: The results were scored under different schemas.
        """
        if a.schema_fingerprint != b.schema_fingerprint or list(a.domain_scores) != list(
            b.domain_scores
        ):
            raise ComparisonError(
                f"Cannot compare {a.entity!r} ({a.schema_name} {a.schema_fingerprint}) "
                f"with {b.entity!r} ({b.schema_name} {b.schema_fingerprint}): "
                "scored under different schemas"
            )

        differences: Dict[str, Decimal] = {}
        a_lead: Optional[str] = None
        b_lead: Optional[str] = None
        a_margin = ZERO
        b_margin = ZERO
        for domain, score_a in a.domain_scores.items():
            diff = score_a - b.domain_scores[domain]
            differences[domain] = diff
            if diff > a_margin:
                a_margin, a_lead = diff, domain
            if -diff > b_margin:
                b_margin, b_lead = -diff, domain

        result = ComparisonResult(
            entity_a=a.entity,
            entity_b=b.entity,
            differences=differences,
            a_lead=a_lead,
            a_margin=a_margin,
            b_lead=b_lead,
            b_margin=b_margin,
        )
        logger.info("comparison_calculated", insight=result.insight)
        return result
