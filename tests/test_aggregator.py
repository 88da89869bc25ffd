"""Tests for domain and composite aggregation."""
import dataclasses
from decimal import Decimal

import pytest

from power_index.models import ScoringMode
from power_index.scoring.aggregator import Aggregator
from power_index.scoring.errors import SchemaError

FULL = {
    "A_one": Decimal(1),
    "A_two": Decimal("0.5"),
    "B_one": Decimal("0.2"),
    "B_unrest": Decimal(1),
}


class TestDomainScore:
    """Tests for Aggregator.domain_score."""

    def test_weighted_sum_times_domain_weight(self, small_schema):
        alpha = small_schema.domain("Alpha")
        # (1 × 0.5 + 0.5 × 0.5) × 0.6
        assert Aggregator.domain_score(alpha, FULL) == Decimal("0.45")

    def test_bounded_by_domain_weight(self, small_schema):
        alpha = small_schema.domain("Alpha")
        ones = {k: Decimal(1) for k in alpha.indicator_keys}
        assert Aggregator.domain_score(alpha, ones) == Decimal("0.6")

    def test_missing_counts_as_zero(self, small_schema):
        alpha = small_schema.domain("Alpha")
        assert Aggregator.domain_score(alpha, {"A_one": Decimal(1)}) == Decimal("0.3")

    def test_explicit_weight(self, small_schema):
        alpha = small_schema.domain("Alpha")
        assert Aggregator.domain_score(alpha, FULL, Decimal(1)) == Decimal("0.75")

    def test_composite_is_sum(self):
        assert Aggregator.composite_index({"a": Decimal("0.2"), "b": Decimal("0.3")}) == Decimal("0.5")
        assert Aggregator.composite_index({}) == 0


class TestAggregate:
    """Tests for Aggregator.aggregate in canonical mode."""

    def test_canonical(self, small_schema, make_record):
        record = make_record("Rome", year=117)
        result = Aggregator(small_schema).aggregate(record, FULL)
        # Beta: (0.2 × 0.7 + 1 × 0.3) × 0.4 = 0.176
        assert result.domain_scores == {"Alpha": Decimal("0.45"), "Beta": Decimal("0.176")}
        assert result.composite_index == Decimal("0.626")
        assert result.ppi == Decimal("62.6")
        assert result.mode == ScoringMode.CANONICAL
        assert result.max_possible_score == 1
        assert result.domain_weights == {"Alpha": Decimal("0.6"), "Beta": Decimal("0.4")}
        assert result.schema_fingerprint == small_schema.fingerprint
        assert result.is_partial is False
        assert result.entity == "Rome"
        assert result.period == "ancient"

    def test_domain_order_follows_schema(self, schema, make_record):
        result = Aggregator(schema).aggregate(make_record(), {})
        assert list(result.domain_scores) == schema.domain_names

    def test_partial_record_flagged(self, small_schema, make_record):
        result = Aggregator(small_schema).aggregate(make_record(), {"A_one": Decimal(1)})
        assert result.is_partial is True
        assert result.missing_indicators == ("A_two", "B_one", "B_unrest")
        assert result.composite_index == Decimal("0.3")
        assert result.to_dict()["is_partial"] is True

    def test_all_zero(self, schema, make_record):
        result = Aggregator(schema).aggregate(
            make_record(), {k: Decimal(0) for k in schema.indicator_keys}
        )
        assert result.composite_index == 0
        assert all(v == 0 for v in result.domain_scores.values())

    def test_all_one(self, schema, make_record):
        result = Aggregator(schema).aggregate(
            make_record(), {k: Decimal(1) for k in schema.indicator_keys}
        )
        assert abs(result.composite_index - 1) <= Decimal("1e-6")
        for domain in schema.domains:
            assert result.domain_scores[domain.name] == Decimal(str(domain.weight))

    def test_idempotent(self, small_schema, make_record):
        aggregator = Aggregator(small_schema)
        record = make_record()
        assert aggregator.aggregate(record, FULL) == aggregator.aggregate(record, FULL)

    def test_fresh_immutable_result(self, small_schema, make_record):
        aggregator = Aggregator(small_schema)
        first = aggregator.aggregate(make_record(), FULL)
        second = aggregator.aggregate(make_record(), FULL)
        assert first is not second
        with pytest.raises(dataclasses.FrozenInstanceError):
            first.composite_index = Decimal(0)


class TestWeightOverrides:
    """Tests for exploratory scoring with explicit domain weights."""

    def test_exploratory_mode(self, small_schema, make_record):
        result = Aggregator(small_schema).aggregate(
            make_record(), FULL, weight_overrides={"Alpha": 0.3, "Beta": 0.2}
        )
        assert result.mode == ScoringMode.EXPLORATORY
        assert result.max_possible_score == Decimal("0.5")
        assert result.domain_scores["Alpha"] == Decimal("0.225")
        assert result.domain_weights == {"Alpha": Decimal("0.3"), "Beta": Decimal("0.2")}
        assert result.attainment == result.composite_index / Decimal("0.5")

    def test_overrides_need_not_sum_to_one(self, small_schema, make_record):
        ones = {k: Decimal(1) for k in small_schema.indicator_keys}
        result = Aggregator(small_schema).aggregate(
            make_record(), ones, weight_overrides={"Alpha": 1.0, "Beta": 0.9}
        )
        assert result.composite_index == Decimal("1.9")
        assert result.max_possible_score == Decimal("1.9")

    def test_schema_weights_unchanged(self, small_schema, make_record):
        aggregator = Aggregator(small_schema)
        aggregator.aggregate(make_record(), FULL, weight_overrides={"Alpha": 0.1, "Beta": 0.1})
        canonical = aggregator.aggregate(make_record(), FULL)
        assert canonical.domain_weights == {"Alpha": Decimal("0.6"), "Beta": Decimal("0.4")}
        assert small_schema.domain("Alpha").weight == 0.6

    def test_unknown_domain(self, small_schema):
        with pytest.raises(SchemaError, match="unknown"):
            Aggregator(small_schema).resolve_weights({"Alpha": 0.5, "Beta": 0.5, "Gamma": 0.1})

    def test_missing_domain(self, small_schema):
        with pytest.raises(SchemaError, match="missing"):
            Aggregator(small_schema).resolve_weights({"Alpha": 0.5})

    @pytest.mark.parametrize("weight", [-0.1, 1.5, 25])
    def test_weight_out_of_range(self, small_schema, weight):
        with pytest.raises(SchemaError):
            Aggregator(small_schema).resolve_weights({"Alpha": weight, "Beta": 0.5})
