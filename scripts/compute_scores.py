"""scripts/compute_scores.py

PPI scoring from a JSON cohort file.

Input: a JSON list of state records (or ``{"records": [...]}``), each shaped
like ``power_index.models.StateRecord``.

Pipeline
--------
1. Ingest + schema-check records         → ingest_records
2. Split into era cohorts (optional)     → group_by_era
3. Per cohort: basis → normalize → score → CohortScorer
4. Contribution breakdown per entity     → ContributionAnalyzer
5. Optional pairwise comparison          → Comparator

Usage
-----
    python scripts/compute_scores.py states.json
    python scripts/compute_scores.py states.json --by-era --log-scale
    python scripts/compute_scores.py states.json --compare "Roman Empire" "Han Dynasty"
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import structlog

from power_index.config import get_settings
from power_index.models import CohortScores, Schema, StateRecord, ingest_records
from power_index.scoring.cohort import CohortScorer, group_by_era
from power_index.scoring.comparator import Comparator
from power_index.scoring.contribution import ContributionAnalyzer
from power_index.scoring.errors import ComparisonError, PowerIndexError
from power_index.scoring.normalizer import NormalizerConfig
from power_index.scoring.registry import SchemaRegistry

# ── logging ──────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s %(name)s %(message)s",
    stream=sys.stdout,
)
structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.dev.ConsoleRenderer(),
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=False,
)
log = structlog.get_logger("compute_scores")


def load_records(path: Path) -> list[dict]:
    """Read raw record dicts from a JSON file."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("records", [])
    return payload


def load_schema() -> Schema:
    """Validated schema from settings; SchemaError aborts the run."""
    settings = get_settings()
    return SchemaRegistry(
        name=settings.schema_name,
        version=settings.schema_version,
        tolerance=settings.schema_tolerance,
    ).get_schema()


def run_pipeline(
    payloads: list[dict],
    by_era: bool = False,
    percentile_cap: Optional[float] = None,
    log_scale: Optional[bool] = None,
) -> list[CohortScores]:
    """Score the given records, one cohort per era when ``by_era`` is set.

    Returns:
        One CohortScores per cohort.
    """
    settings = get_settings()
    schema = load_schema()

    config = NormalizerConfig.from_settings(settings)
    if log_scale is not None:
        config = NormalizerConfig(use_log_scale=log_scale, log_scale_keys=config.log_scale_keys)
    scorer = CohortScorer(
        schema,
        config=config,
        percentile_cap=percentile_cap or settings.percentile_cap,
    )

    records: list[StateRecord] = ingest_records(schema, payloads)
    if by_era:
        cohorts = list(group_by_era(records).items())
    else:
        cohorts = [("all", records)]

    results = []
    for era, cohort in cohorts:
        era_label = getattr(era, "value", era)
        log.info("scoring_cohort", era=era_label, size=len(cohort))
        scores = scorer.score(cohort)
        for entity, reason in scores.excluded.items():
            log.warning("entity_excluded", era=era_label, entity=entity, reason=reason)
        results.append(scores)
    return results


def _print_table(cohort: CohortScores, analyzer: ContributionAnalyzer) -> None:
    """Pretty-print one cohort's scores."""
    header = f"{'State':<28}  {'Year':>9}  {'Period':<13}  {'PPI':>7}  {'Pctl':>6}  {'Top Domain':<24}  {'Partial':<7}"
    print("\n" + "=" * len(header))
    print(header)
    print("=" * len(header))
    for r in cohort.results:
        top = analyzer.analyze(r)[0]
        print(
            f"{r.entity[:28]:<28}  {f'{r.year} {r.era}':>9}  {r.period:<13}  "
            f"{float(r.ppi):>7.2f}  {float(r.percentile_rank or 0):>6.1f}  "
            f"{top.domain[:24]:<24}  {'yes' if r.is_partial else 'no':<7}"
        )
    print("=" * len(header))


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Compute PPI scores from a JSON cohort file")
    parser.add_argument("path", type=Path, help="JSON file of state records")
    parser.add_argument("--by-era", action="store_true", help="Normalize each era separately")
    parser.add_argument("--percentile-cap", type=float, default=None)
    parser.add_argument("--log-scale", action="store_true", default=None)
    parser.add_argument("--compare", nargs=2, metavar=("STATE_A", "STATE_B"))
    args = parser.parse_args()

    try:
        cohorts = run_pipeline(
            load_records(args.path),
            by_era=args.by_era,
            percentile_cap=args.percentile_cap,
            log_scale=args.log_scale,
        )
    except PowerIndexError as exc:
        log.error("pipeline_failed", error=str(exc))
        sys.exit(1)

    analyzer = ContributionAnalyzer(load_schema())
    for cohort in cohorts:
        _print_table(cohort, analyzer)

    if args.compare:
        name_a, name_b = args.compare
        scored = {r.entity: r for c in cohorts for r in c.results}
        missing = [n for n in (name_a, name_b) if n not in scored]
        if missing:
            log.error("comparison_entity_missing", missing=missing)
            sys.exit(1)
        try:
            comparison = Comparator().compare(scored[name_a], scored[name_b])
        except ComparisonError as exc:
            log.error("comparison_failed", error=str(exc))
            sys.exit(1)
        print(f"\n{comparison.insight}.")
