"""Shared, cached engine objects for the routers."""
from functools import lru_cache

from power_index.config import get_settings
from power_index.models.schema import Schema
from power_index.scoring.registry import SchemaRegistry


@lru_cache
def get_registry() -> SchemaRegistry:
    """Build the canonical schema registry once; SchemaError aborts startup."""
    settings = get_settings()
    return SchemaRegistry(
        name=settings.schema_name,
        version=settings.schema_version,
        tolerance=settings.schema_tolerance,
    )


def get_schema() -> Schema:
    return get_registry().get_schema()
