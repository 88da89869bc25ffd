"""Routers package - API endpoint routers."""

from .health import router as health_router
from .schema import router as schema_router
from .scores import router as scores_router

__all__ = [
    "health_router",
    "schema_router",
    "scores_router",
]
