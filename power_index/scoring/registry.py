"""Schema Registry: validated, read-only domain/sub-indicator definitions.

Definitions use the nested mapping shape

    {domain_name: {"short": ..., "weight": ..., "color": ...,
                   "sub_indicators": {name: {"key": ..., "weight": ...,
                                             "unit": ..., "tooltip": ...,
                                             "invert": ...}}}}

Validation at construction (any failure raises ``SchemaError``):
  * domain weights are non-negative, at most 1, and sum to 1.0 ± tolerance
  * every domain has sub-indicators whose weights are non-negative,
    at most 1, and sum to 1.0 ± tolerance
  * sub-indicator keys are unique across the whole schema

Weights are fractions. A weight above 1 almost always means a percentage
table was supplied, so it is rejected rather than rescaled.
"""
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

import structlog
from pydantic import ValidationError

from power_index.models.schema import Domain, Schema, SubIndicator
from power_index.scoring.errors import SchemaError
from power_index.scoring.utils import ONE, ZERO, to_decimal

logger = structlog.get_logger(__name__)

DEFAULT_TOLERANCE: float = 1e-6

# ── Canonical PPI schema: 8 domains / 38 sub-indicators ───────────────────────
PPI_DOMAINS: Dict[str, Dict[str, Any]] = {
    "Military Power": {
        "short": "M",
        "weight": 0.25,
        "color": "#ef4444",
        "sub_indicators": {
            "Manpower": {"key": "M_manpower", "weight": 0.25, "unit": "soldiers", "tooltip": "Total military personnel"},
            "Battlefield Success": {"key": "M_battlefield_success", "weight": 0.20, "unit": "ratio", "tooltip": "Win/loss ratio"},
            "Navy Strength": {"key": "M_navy_strength", "weight": 0.15, "unit": "tonnage", "tooltip": "Naval tonnage"},
            "Military Technology": {"key": "M_mil_tech", "weight": 0.20, "unit": "0-100", "tooltip": "Technology adoption"},
            "Logistics & Projection": {"key": "M_logistics", "weight": 0.10, "unit": "0-100", "tooltip": "Power projection capacity"},
            "Force Range": {"key": "M_range", "weight": 0.10, "unit": "km", "tooltip": "Maximum deployment distance"},
        },
    },
    "Territorial Control": {
        "short": "T",
        "weight": 0.15,
        "color": "#f97316",
        "sub_indicators": {
            "Territory Size": {"key": "T_size", "weight": 0.50, "unit": "km²", "tooltip": "Land area under control"},
            "Population Coverage": {"key": "T_pop_share", "weight": 0.30, "unit": "%", "tooltip": "Share of world population"},
            "Border Contiguity": {"key": "T_contiguity", "weight": 0.10, "unit": "0-100", "tooltip": "Territorial cohesion"},
            "Number of Provinces": {"key": "T_provinces", "weight": 0.10, "unit": "count", "tooltip": "Administrative provinces"},
        },
    },
    "Economic Power": {
        "short": "E",
        "weight": 0.20,
        "color": "#22c55e",
        "sub_indicators": {
            "GDP/Production": {"key": "E_gdp", "weight": 0.40, "unit": "currency", "tooltip": "Total GDP"},
            "GDP Share": {"key": "E_gdp_share", "weight": 0.20, "unit": "%", "tooltip": "Share of world GDP"},
            "Trade Volume": {"key": "E_trade", "weight": 0.15, "unit": "currency", "tooltip": "Total trade"},
            "Industrial Capacity": {"key": "E_industry", "weight": 0.10, "unit": "tons", "tooltip": "Industrial output"},
            "Natural Resources": {"key": "E_resources", "weight": 0.10, "unit": "0-100", "tooltip": "Resource wealth"},
            "Currency/Finance": {"key": "E_finance", "weight": 0.05, "unit": "0-100", "tooltip": "Financial centrality"},
        },
    },
    "Demographics": {
        "short": "DEM",
        "weight": 0.10,
        "color": "#3b82f6",
        "sub_indicators": {
            "Total Population": {"key": "DEM_pop", "weight": 0.50, "unit": "people", "tooltip": "Total population"},
            "Population Density": {"key": "DEM_density", "weight": 0.15, "unit": "people/km²", "tooltip": "People per km²"},
            "Growth Rate": {"key": "DEM_growth", "weight": 0.15, "unit": "%", "tooltip": "Annual growth rate"},
            "Urbanization": {"key": "DEM_urban", "weight": 0.20, "unit": "%", "tooltip": "Urban population share"},
        },
    },
    "Administrative Capacity": {
        "short": "AD",
        "weight": 0.10,
        "color": "#a855f7",
        "sub_indicators": {
            "Tax Revenue/GDP": {"key": "AD_tax", "weight": 0.25, "unit": "%", "tooltip": "Tax as % of GDP"},
            "Bureaucracy Size": {"key": "AD_bureaucracy", "weight": 0.25, "unit": "per 1000", "tooltip": "Officials per 1000 people"},
            "Internal Security": {"key": "AD_security", "weight": 0.20, "unit": "0-100", "tooltip": "Internal order capacity"},
            "Infrastructure Network": {"key": "AD_infra", "weight": 0.15, "unit": "km", "tooltip": "Roads/communications"},
            "Legal/Institutional Reach": {"key": "AD_law", "weight": 0.15, "unit": "%", "tooltip": "Uniform law coverage"},
        },
    },
    "Technology & Science": {
        "short": "TS",
        "weight": 0.10,
        "color": "#06b6d4",
        "sub_indicators": {
            "Innovation Output": {"key": "TS_innov", "weight": 0.25, "unit": "count", "tooltip": "Major inventions"},
            "Education/Literacy": {"key": "TS_literacy", "weight": 0.25, "unit": "%", "tooltip": "Literacy rate"},
            "Science Funding": {"key": "TS_science", "weight": 0.20, "unit": "% GDP", "tooltip": "Research expenditure"},
            "Industrial Technology": {"key": "TS_ind_tech", "weight": 0.15, "unit": "0-100", "tooltip": "Tech adoption"},
            "Arms Technology": {"key": "TS_arms_tech", "weight": 0.15, "unit": "0-100", "tooltip": "Military tech level"},
        },
    },
    "Cultural Influence": {
        "short": "CI",
        "weight": 0.05,
        "color": "#ec4899",
        "sub_indicators": {
            "Religion/Ideology Spread": {"key": "CI_religion", "weight": 0.40, "unit": "%", "tooltip": "Dominant religion followers"},
            "Language/Culture Export": {"key": "CI_language", "weight": 0.30, "unit": "regions", "tooltip": "Cultural reach"},
            "Artistic Output": {"key": "CI_art", "weight": 0.20, "unit": "count", "tooltip": "Influential works"},
            "Global Influence Index": {"key": "CI_index", "weight": 0.10, "unit": "0-100", "tooltip": "Composite influence"},
        },
    },
    "Diplomacy & Hegemony": {
        "short": "DH",
        "weight": 0.05,
        "color": "#eab308",
        "sub_indicators": {
            "Alliances/Client States": {"key": "DH_alliances", "weight": 0.40, "unit": "count", "tooltip": "Formal allies"},
            "Coalition Leadership": {"key": "DH_coalitions", "weight": 0.25, "unit": "count", "tooltip": "Coalitions led"},
            "Diplomatic Missions": {"key": "DH_missions", "weight": 0.25, "unit": "count", "tooltip": "Embassies abroad"},
            "Colonial Diplomacy": {"key": "DH_colonial", "weight": 0.10, "unit": "0-100", "tooltip": "Diplomatic leverage"},
        },
    },
}


def _build_schema(
    definitions: Mapping[str, Mapping[str, Any]],
    name: str,
    version: str,
) -> Schema:
    try:
        domains = []
        for domain_name, definition in definitions.items():
            subs = tuple(
                SubIndicator(
                    key=sub["key"],
                    name=sub_name,
                    domain=domain_name,
                    weight=sub["weight"],
                    unit=sub.get("unit", ""),
                    tooltip=sub.get("tooltip", ""),
                    invert=sub.get("invert", False),
                )
                for sub_name, sub in definition.get("sub_indicators", {}).items()
            )
            domains.append(
                Domain(
                    name=domain_name,
                    short=definition.get("short", ""),
                    weight=definition["weight"],
                    color=definition.get("color"),
                    sub_indicators=subs,
                )
            )
        return Schema(name=name, version=version, domains=tuple(domains))
    except (AttributeError, KeyError, TypeError, ValidationError) as exc:
        raise SchemaError(f"Malformed schema definition: {exc}") from exc


def _check_weights(label: str, weights: Dict[str, Decimal], tolerance: Decimal) -> None:
    for item, w in weights.items():
        if w < ZERO:
            raise SchemaError(f"{label}: weight of {item!r} is negative ({w})")
        if w > ONE:
            raise SchemaError(
                f"{label}: weight of {item!r} is {w}; weights are fractions in [0, 1]"
            )
    total = sum(weights.values(), ZERO)
    if abs(total - ONE) > tolerance:
        raise SchemaError(f"{label}: weights sum to {total}, expected 1.0 (±{tolerance})")


def validate_schema(schema: Schema, tolerance: float = DEFAULT_TOLERANCE) -> Schema:
    """Check every weight invariant of ``schema``.

    Raises:
        SchemaError: On the first violated invariant.
    """
    tol = to_decimal(tolerance)
    if not schema.domains:
        raise SchemaError("Schema defines no domains")

    names = schema.domain_names
    if len(set(names)) != len(names):
        raise SchemaError("Schema has duplicate domain names")

    _check_weights(
        "Domain weights",
        {d.name: to_decimal(d.weight) for d in schema.domains},
        tol,
    )

    seen: Dict[str, str] = {}
    for domain in schema.domains:
        if not domain.sub_indicators:
            raise SchemaError(f"Domain {domain.name!r} has no sub-indicators")
        for sub in domain.sub_indicators:
            if sub.key in seen:
                raise SchemaError(
                    f"Sub-indicator key {sub.key!r} is defined in both "
                    f"{seen[sub.key]!r} and {domain.name!r}"
                )
            seen[sub.key] = domain.name
        _check_weights(
            f"Sub-indicator weights of {domain.name!r}",
            {s.key: to_decimal(s.weight) for s in domain.sub_indicators},
            tol,
        )
    return schema


class SchemaRegistry:
    """Build and validate a Schema once; expose it read-only.

    Parameters
    ----------
    definitions:
        Nested domain definitions; defaults to the canonical ``PPI_DOMAINS``.
    name, version:
        Schema identity carried into every ScoreResult.
    tolerance:
        Allowed deviation of each weight sum from 1.0 (default 1e-6).
    """

    def __init__(
        self,
        definitions: Optional[Mapping[str, Mapping[str, Any]]] = None,
        name: str = "PPI",
        version: str = "1.0",
        tolerance: float = DEFAULT_TOLERANCE,
    ) -> None:
        schema = _build_schema(
            definitions if definitions is not None else PPI_DOMAINS, name, version
        )
        try:
            self._schema = validate_schema(schema, tolerance)
        except SchemaError as exc:
            logger.error("schema_validation_failed", schema=name, error=str(exc))
            raise

        logger.info(
            "schema_registry_initialized",
            schema=name,
            version=version,
            domains=len(self._schema.domains),
            indicators=len(self._schema.indicator_keys),
            fingerprint=self._schema.fingerprint,
        )

    def get_schema(self) -> Schema:
        return self._schema


def ppi_schema(tolerance: float = DEFAULT_TOLERANCE) -> Schema:
    """The canonical 8-domain / 38-indicator PPI schema."""
    return SchemaRegistry(PPI_DOMAINS, tolerance=tolerance).get_schema()
