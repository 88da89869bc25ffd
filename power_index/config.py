"""Configuration management using Pydantic Settings."""
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Power Index Scoring Engine"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Schema
    schema_name: str = "PPI"
    schema_version: str = "1.0"
    schema_tolerance: float = Field(default=1e-6, gt=0, le=0.01)

    # Normalization
    percentile_cap: float = Field(default=97.5, gt=0, le=100)
    use_log_scale: bool = False
    # Restricts log scaling to these indicator keys; empty means every indicator.
    # Set as JSON in the environment, e.g. LOG_SCALE_INDICATORS='["E_gdp","DEM_pop"]'
    log_scale_indicators: List[str] = Field(default_factory=list)

    # What-if analysis
    sensitivity_delta: float = Field(default=0.05, gt=0, le=1)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
