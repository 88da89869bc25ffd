"""Pytest fixtures and configuration."""
import copy
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from power_index.models import ScoreResult, ScoringMode, StateRecord
from power_index.scoring.registry import SchemaRegistry, ppi_schema

SMALL_DOMAINS = {
    "Alpha": {
        "short": "A",
        "weight": 0.6,
        "sub_indicators": {
            "Alpha One": {"key": "A_one", "weight": 0.5, "unit": "count"},
            "Alpha Two": {"key": "A_two", "weight": 0.5, "unit": "count"},
        },
    },
    "Beta": {
        "short": "B",
        "weight": 0.4,
        "sub_indicators": {
            "Beta One": {"key": "B_one", "weight": 0.7, "unit": "km"},
            "Beta Unrest": {"key": "B_unrest", "weight": 0.3, "unit": "events", "invert": True},
        },
    },
}

SINGLE_DOMAINS = {
    "Power": {
        "weight": 1.0,
        "sub_indicators": {"Raw Power": {"key": "X", "weight": 1.0}},
    },
}


@pytest.fixture
def schema():
    """Canonical 8-domain PPI schema."""
    return ppi_schema()


@pytest.fixture
def small_definitions():
    """Editable copy of the two-domain definitions."""
    return copy.deepcopy(SMALL_DOMAINS)


@pytest.fixture
def small_schema():
    """Two-domain schema with one inverted indicator."""
    return SchemaRegistry(SMALL_DOMAINS, name="SMALL").get_schema()


@pytest.fixture
def single_schema():
    """One domain, one indicator."""
    return SchemaRegistry(SINGLE_DOMAINS, name="SINGLE").get_schema()


@pytest.fixture
def make_record():
    """Factory for StateRecords."""
    def _make(name="Test State", year=100, era="AD", **indicators):
        return StateRecord(name=name, year=year, era=era, indicators=indicators)
    return _make


@pytest.fixture
def uniform_record(schema):
    """Factory for records with every PPI indicator set to one value."""
    def _make(name, value, year=1900, era="AD"):
        return StateRecord(
            name=name,
            year=year,
            era=era,
            indicators={k: value for k in schema.indicator_keys},
        )
    return _make


@pytest.fixture
def make_result():
    """Factory for ScoreResults with hand-picked domain scores."""
    def _make(domain_scores, entity="Test State", fingerprint="f" * 16, weights=None):
        scores = {k: Decimal(str(v)) for k, v in domain_scores.items()}
        used = {k: Decimal(str(v)) for k, v in (weights or {k: 1 for k in scores}).items()}
        return ScoreResult(
            entity=entity,
            year=100,
            era="AD",
            period="ancient",
            schema_name="TEST",
            schema_fingerprint=fingerprint,
            mode=ScoringMode.CANONICAL,
            domain_scores=scores,
            composite_index=sum(scores.values(), Decimal(0)),
            max_possible_score=sum(used.values(), Decimal(0)),
            domain_weights=used,
            indicator_values={},
        )
    return _make


@pytest.fixture
def sample_cohort_payload():
    """Three ancient states with every PPI indicator in ratio 1:10:100."""
    from power_index.scoring.registry import PPI_DOMAINS

    keys = [s["key"] for d in PPI_DOMAINS.values() for s in d["sub_indicators"].values()]
    return {
        "records": [
            {"name": "Weak", "year": 200, "era": "BC", "indicators": {k: 10 for k in keys}},
            {"name": "Medium", "year": 150, "era": "BC", "indicators": {k: 100 for k in keys}},
            {"name": "Strong", "year": 117, "era": "AD", "indicators": {k: 1000 for k in keys}},
        ],
        "percentile_cap": 100,
    }


@pytest.fixture
def client():
    """Test client running the app lifespan."""
    from power_index.main import app
    with TestClient(app) as c:
        yield c
