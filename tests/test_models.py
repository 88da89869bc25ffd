"""Tests for record models and ingestion."""
import dataclasses

import pytest
from pydantic import ValidationError

from power_index.models import (
    EraMarker,
    HistoricalEra,
    StateRecord,
    classify_era,
    ingest_records,
    validate_record,
)
from power_index.scoring.errors import RecordError


class TestStateRecord:
    """Tests for the StateRecord model."""

    def test_valid(self):
        record = StateRecord(
            name="  Roman Empire ",
            year=117,
            era="AD",
            reign_length=19,
            indicators={"M_manpower": 400000},
        )
        assert record.name == "Roman Empire"
        assert record.era == EraMarker.AD
        assert record.label == "Roman Empire (117 AD)"

    def test_defaults(self):
        record = StateRecord(name="Nameless", year=10)
        assert record.era == EraMarker.AD
        assert record.reign_length is None
        assert record.indicators == {}

    def test_empty_name(self):
        with pytest.raises(ValidationError) as exc_info:
            StateRecord(name="", year=1)
        assert "string_too_short" in str(exc_info.value)

    @pytest.mark.parametrize("name", ["   ", "\t\n"])
    def test_blank_name_rejected(self, name):
        with pytest.raises(ValidationError) as exc_info:
            StateRecord(name=name, year=1)
        assert "string_too_short" in str(exc_info.value)

    def test_negative_year(self):
        with pytest.raises(ValidationError):
            StateRecord(name="X", year=-5)

    def test_invalid_era(self):
        with pytest.raises(ValidationError):
            StateRecord(name="X", year=5, era="CE")

    def test_non_finite_indicator(self):
        with pytest.raises(ValidationError, match="finite"):
            StateRecord(name="X", year=5, indicators={"M_manpower": float("nan")})

    def test_signed_year(self):
        assert StateRecord(name="Qin", year=221, era="BC").signed_year == -221
        assert StateRecord(name="Han", year=100, era="AD").signed_year == 100

    def test_frozen(self):
        record = StateRecord(name="X", year=5)
        with pytest.raises(ValidationError):
            record.year = 6


class TestEraClassification:
    """Tests for era cohort assignment."""

    @pytest.mark.parametrize(
        "signed_year,expected",
        [
            (-221, HistoricalEra.ANCIENT),
            (499, HistoricalEra.ANCIENT),
            (500, HistoricalEra.MEDIEVAL),
            (1279, HistoricalEra.MEDIEVAL),
            (1500, HistoricalEra.EARLY_MODERN),
            (1683, HistoricalEra.EARLY_MODERN),
            (1800, HistoricalEra.MODERN),
            (1991, HistoricalEra.MODERN),
        ],
    )
    def test_classify(self, signed_year, expected):
        assert classify_era(signed_year) == expected

    def test_record_property(self):
        assert StateRecord(name="Athens", year=431, era="BC").historical_era == HistoricalEra.ANCIENT


class TestIngestion:
    """Schema-checked ingestion rejects unknown indicator keys."""

    def test_known_keys_accepted(self, schema):
        record = StateRecord(name="X", year=5, indicators={"E_gdp": 1.0, "T_size": 2.0})
        assert validate_record(schema, record) is record

    def test_unknown_keys_rejected(self, schema):
        record = StateRecord(name="X", year=5, indicators={"E_gdp": 1.0, "E_gpd": 2.0, "zzz": 3})
        with pytest.raises(RecordError) as exc_info:
            validate_record(schema, record)
        assert exc_info.value.unknown_keys == ("E_gpd", "zzz")

    def test_ingest_records(self, schema):
        records = ingest_records(
            schema,
            [
                {"name": "A", "year": 1, "indicators": {"E_gdp": 5}},
                {"name": "B", "year": 2, "era": "BC"},
            ],
        )
        assert [r.name for r in records] == ["A", "B"]
        assert records[1].era == EraMarker.BC

    def test_ingest_rejects_unknown(self, schema):
        with pytest.raises(RecordError):
            ingest_records(schema, [{"name": "A", "year": 1, "indicators": {"bogus": 1}}])


class TestScoreResultSnapshot:
    """ScoreResult behaves as an immutable snapshot."""

    def test_frozen(self, make_result):
        result = make_result({"Alpha": 0.3})
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.composite_index = 1

    def test_with_percentile_returns_copy(self, make_result):
        result = make_result({"Alpha": 0.3})
        ranked = result.with_percentile(50)
        assert ranked.percentile_rank == 50
        assert result.percentile_rank is None

    def test_to_dict_is_self_describing(self, make_result):
        data = make_result({"Alpha": 0.3, "Beta": 0.2}, weights={"Alpha": 0.6, "Beta": 0.4}).to_dict()
        assert data["domain_weights"] == {"Alpha": 0.6, "Beta": 0.4}
        assert data["composite_index"] == pytest.approx(0.5)
        assert data["ppi"] == pytest.approx(50.0)
        assert data["mode"] == "canonical"
        assert data["is_partial"] is False
