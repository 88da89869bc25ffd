"""Enumeration types for the Power Index engine."""
from enum import Enum


class EraMarker(str, Enum):
    """Calendar era of a record's year."""
    BC = "BC"
    AD = "AD"


class HistoricalEra(str, Enum):
    """Comparison cohorts used for era-relative normalization."""
    ANCIENT = "ancient"  # before 500 AD
    MEDIEVAL = "medieval"  # 500 – 1499
    EARLY_MODERN = "early_modern"  # 1500 – 1799
    MODERN = "modern"  # 1800 – present


class ScoringMode(str, Enum):
    """Aggregation mode."""
    CANONICAL = "canonical"  # schema weights, sum-to-1 enforced
    EXPLORATORY = "exploratory"  # user weight overrides, sum not enforced


# First signed year of each era (BC years are negative)
ERA_START_YEARS: dict[HistoricalEra, int] = {
    HistoricalEra.MEDIEVAL: 500,
    HistoricalEra.EARLY_MODERN: 1500,
    HistoricalEra.MODERN: 1800,
}
