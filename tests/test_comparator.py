"""Tests for pairwise comparison."""
from decimal import Decimal

import pytest

from power_index.scoring.comparator import Comparator
from power_index.scoring.errors import ComparisonError

ROME = {
    "Military Power": 22.1, "Economic Power": 18.3, "Territorial Control": 13.8,
    "Demographics": 8.5, "Administrative Capacity": 9.2, "Technology & Science": 7.8,
    "Cultural Influence": 4.5, "Diplomacy & Hegemony": 4.2,
}
MONGOLS = {
    "Military Power": 24.3, "Economic Power": 15.2, "Territorial Control": 14.8,
    "Demographics": 7.9, "Administrative Capacity": 7.5, "Technology & Science": 6.8,
    "Cultural Influence": 3.9, "Diplomacy & Hegemony": 4.8,
}


class TestComparator:
    """Tests for Comparator.compare."""

    def test_leading_domains(self, make_result):
        rome = make_result(ROME, entity="Roman Empire")
        mongols = make_result(MONGOLS, entity="Mongol Empire")
        result = Comparator().compare(rome, mongols)
        assert result.a_lead == "Economic Power"
        assert result.a_margin == Decimal("3.1")
        assert result.b_lead == "Military Power"
        assert result.b_margin == Decimal("2.2")
        assert result.insight == (
            "Roman Empire leads in Economic Power; Mongol Empire leads in Military Power"
        )

    def test_differences(self, make_result):
        result = Comparator().compare(make_result(ROME), make_result(MONGOLS))
        assert result.differences["Territorial Control"] == Decimal("-1.0")
        assert list(result.differences) == list(ROME)

    def test_antisymmetric(self, make_result):
        rome = make_result(ROME, entity="Roman Empire")
        mongols = make_result(MONGOLS, entity="Mongol Empire")
        forward = Comparator().compare(rome, mongols)
        backward = Comparator().compare(mongols, rome)
        assert forward.a_lead == backward.b_lead
        assert forward.b_lead == backward.a_lead
        assert forward.a_margin == backward.b_margin

    def test_ties_keep_first_domain(self, make_result):
        a = make_result({"X": 0.5, "Y": 0.5, "Z": 0.1})
        b = make_result({"X": 0.3, "Y": 0.3, "Z": 0.3})
        result = Comparator().compare(a, b)
        assert result.a_lead == "X"
        assert result.b_lead == "Z"

    def test_one_sided(self, make_result):
        a = make_result({"X": 0.5, "Y": 0.4})
        b = make_result({"X": 0.2, "Y": 0.4}, entity="Other")
        result = Comparator().compare(a, b)
        assert result.a_lead == "X"
        assert result.b_lead is None
        assert result.b_margin == 0
        assert result.insight == "Test State leads in X"

    def test_identical(self, make_result):
        a = make_result({"X": 0.5}, entity="A")
        b = make_result({"X": 0.5}, entity="B")
        result = Comparator().compare(a, b)
        assert result.a_lead is None and result.b_lead is None
        assert "level" in result.insight

    def test_different_schema_rejected(self, make_result):
        a = make_result(ROME, fingerprint="a" * 16)
        b = make_result(ROME, fingerprint="b" * 16)
        with pytest.raises(ComparisonError, match="different schemas"):
            Comparator().compare(a, b)

    def test_different_domains_rejected(self, make_result):
        with pytest.raises(ComparisonError):
            Comparator().compare(make_result({"X": 1}), make_result({"Y": 1}))

    def test_to_dict(self, make_result):
        data = Comparator().compare(make_result(ROME), make_result(MONGOLS)).to_dict()
        assert data["a_lead"] == "Economic Power"
        assert data["differences"]["Military Power"] == pytest.approx(-2.2)
        assert "insight" in data
