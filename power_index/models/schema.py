"""Schema models: domains and their sub-indicators.

Models are frozen; weight invariants are enforced by
``power_index.scoring.registry.SchemaRegistry`` so that violations surface
as ``SchemaError`` rather than field-level validation errors.
"""
import hashlib
import json
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class SubIndicator(BaseModel):
    """A single measurable raw quantity contributing to a domain."""
    model_config = ConfigDict(frozen=True)

    key: str = Field(..., min_length=1, description="Unique indicator key, e.g. M_manpower")
    name: str = Field(..., min_length=1)
    domain: str = Field(..., min_length=1)
    weight: float = Field(..., description="Weight within its domain (0-1)")
    unit: str = ""
    tooltip: str = ""
    invert: bool = Field(
        default=False,
        description="True when lower raw values indicate higher power",
    )


class Domain(BaseModel):
    """Top-level category of state power."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    short: str = ""
    weight: float = Field(..., description="Weight relative to the whole index (0-1)")
    color: Optional[str] = None  # presentation only
    sub_indicators: Tuple[SubIndicator, ...]

    @property
    def indicator_keys(self) -> List[str]:
        return [s.key for s in self.sub_indicators]


class Schema(BaseModel):
    """Immutable set of domains defining one scoring scheme."""
    model_config = ConfigDict(frozen=True)

    name: str = "PPI"
    version: str = "1.0"
    domains: Tuple[Domain, ...]

    @property
    def domain_names(self) -> List[str]:
        return [d.name for d in self.domains]

    @property
    def indicator_keys(self) -> List[str]:
        return [key for d in self.domains for key in d.indicator_keys]

    @property
    def domain_weights(self) -> Dict[str, float]:
        return {d.name: d.weight for d in self.domains}

    @property
    def fingerprint(self) -> str:
        """Deterministic digest of the scoring structure.

        Covers domain names, indicator keys, weights and inversion flags;
        presentation fields (color, short label, unit, tooltip) are left out.
        """
        structure = [
            {
                "name": d.name,
                "weight": d.weight,
                "sub_indicators": [
                    {"key": s.key, "weight": s.weight, "invert": s.invert}
                    for s in d.sub_indicators
                ],
            }
            for d in self.domains
        ]
        payload = json.dumps(structure, sort_keys=True)
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:16]

    def domain(self, name: str) -> Domain:
        for d in self.domains:
            if d.name == name:
                return d
        raise KeyError(name)

    def indicator(self, key: str) -> SubIndicator:
        for d in self.domains:
            for s in d.sub_indicators:
                if s.key == key:
                    return s
        raise KeyError(key)
