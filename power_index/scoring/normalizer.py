"""Normalizer: raw indicator values → [0, 1].

Basis derivation (once per era cohort)
--------------------------------------
  reference(key) = P_cap( observed raw values of key )     cap default 97.5

  P is the linearly interpolated percentile over the cohort's valid records.
  Records holding an invalid value (negative magnitude indicator, unknown
  key) are reported and excluded from the whole basis. All records are read
  before any reference value is finalized.

Per-value normalization
-----------------------
  inverted   = max(cohort_max − raw + |cohort_min|, 0)   (invert=True only)
  capped     = min(value, reference)
  linear     = capped / reference
  log        = ln(1 + capped) / ln(1 + reference)
  reference == 0  →  normalized = 0

For inverted indicators the basis is derived from the inverted
distribution, so the lowest raw value maps to the cohort maximum.
"""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple

import structlog

from power_index.models.records import StateRecord, validate_record
from power_index.models.schema import Schema
from power_index.scoring.errors import NormalizationError, RecordError, SchemaError
from power_index.scoring.utils import ONE, ZERO, clamp, percentile, to_decimal

logger = structlog.get_logger(__name__)

DEFAULT_PERCENTILE_CAP: Decimal = Decimal("97.5")


@dataclass(frozen=True)
class BasisEntry:
    """Reference value for one indicator within one cohort."""

    key: str
    reference: Decimal
    cohort_max: Decimal
    cohort_min: Decimal
    observations: int
    inverted: bool = False

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "reference": float(self.reference),
            "cohort_max": float(self.cohort_max),
            "cohort_min": float(self.cohort_min),
            "observations": self.observations,
            "inverted": self.inverted,
        }


@dataclass(frozen=True)
class NormalizationBasis:
    """Per-indicator reference values derived from one cohort."""

    schema_fingerprint: str
    percentile_cap: Decimal
    entries: Dict[str, BasisEntry]
    cohort_size: int
    excluded: Dict[str, str] = field(default_factory=dict)   # entity → reason

    def entry(self, key: str) -> BasisEntry:
        try:
            return self.entries[key]
        except KeyError:
            raise NormalizationError(f"No basis entry for indicator {key!r}") from None

    def to_dict(self) -> dict:
        return {
            "schema_fingerprint": self.schema_fingerprint,
            "percentile_cap": float(self.percentile_cap),
            "cohort_size": self.cohort_size,
            "entries": {k: e.to_dict() for k, e in self.entries.items()},
            "excluded": dict(self.excluded),
        }


@dataclass(frozen=True)
class NormalizerConfig:
    """Normalization flags.

    ``use_log_scale`` turns on log scaling; ``log_scale_keys`` optionally
    restricts it to the listed (typically skewed) indicators.
    """

    use_log_scale: bool = False
    log_scale_keys: Optional[FrozenSet[str]] = None

    def uses_log(self, key: str) -> bool:
        if not self.use_log_scale:
            return False
        return self.log_scale_keys is None or key in self.log_scale_keys

    @classmethod
    def from_settings(cls, settings) -> "NormalizerConfig":
        keys = settings.log_scale_indicators
        return cls(
            use_log_scale=settings.use_log_scale,
            log_scale_keys=frozenset(keys) if keys else None,
        )


def reflect(raw: Decimal, cohort_max: Decimal, cohort_min: Decimal) -> Decimal:
    """Mirror an inverted raw value so the cohort minimum scores highest.

    The offset |cohort_min| keeps reflected values positive when the cohort
    holds negative raw values.
    """
    return max(cohort_max - raw + abs(cohort_min), ZERO)


def normalize(
    raw: Decimal,
    basis: Decimal,
    use_log_scale: bool = False,
    invert: bool = False,
    cohort_max: Optional[Decimal] = None,
    cohort_min: Decimal = ZERO,
) -> Decimal:
    """Normalize one raw value against its basis reference.

    Args:
        raw: Raw indicator value.
        basis: Reference value (cohort percentile cap) for the indicator.
        use_log_scale: Apply ``ln(1 + x)`` scaling.
        invert: Lower raw values indicate higher power.
        cohort_max: Cohort maximum raw value; required when ``invert``.
        cohort_min: Cohort minimum raw value (inversion only).

    Returns:
        Normalized value in [0, 1].

    Raises:
        NormalizationError: Negative ``basis``, negative ``raw`` for a
            non-inverted indicator, or ``invert`` without ``cohort_max``.
    """
    raw = to_decimal(raw)
    basis = to_decimal(basis)
    if basis < ZERO:
        raise NormalizationError(f"basis must be non-negative, got {basis}")

    if invert:
        if cohort_max is None:
            raise NormalizationError("inverted indicators require the cohort maximum")
        value = reflect(raw, to_decimal(cohort_max), to_decimal(cohort_min))
    else:
        if raw < ZERO:
            raise NormalizationError(f"raw value must be non-negative, got {raw}")
        value = raw

    if basis == ZERO:
        return ZERO

    capped = min(value, basis)
    log_basis = (ONE + basis).ln() if use_log_scale else ZERO
    if log_basis > ZERO:
        normalized = (ONE + capped).ln() / log_basis
    else:
        # ln(1 + x) ≈ x below the context precision
        normalized = capped / basis
    return clamp(normalized)


class Normalizer:
    """Derive cohort bases and normalize records for one schema.

    Parameters
    ----------
    schema:
        Validated schema; supplies the key set and inversion flags.
    config:
        Log-scaling flags (default: linear for every indicator).

    Raises
    ------
    SchemaError:
        ``config.log_scale_keys`` names indicators the schema does not define.
    """

    def __init__(self, schema: Schema, config: Optional[NormalizerConfig] = None) -> None:
        self.schema = schema
        self.config = config or NormalizerConfig()
        if self.config.log_scale_keys:
            unknown = sorted(self.config.log_scale_keys - set(schema.indicator_keys))
            if unknown:
                raise SchemaError(
                    f"Log-scale indicators not defined by schema {schema.name}: "
                    f"{', '.join(unknown)}"
                )

    # ── validation ────────────────────────────────────────────────────────────

    def check_record(self, record: StateRecord) -> None:
        """Raise if ``record`` cannot take part in normalization.

        Raises:
            RecordError: Unknown indicator keys.
            NormalizationError: Negative value for a non-inverted indicator.
        """
        validate_record(self.schema, record)
        for key, value in record.indicators.items():
            if value < 0 and not self.schema.indicator(key).invert:
                raise NormalizationError(
                    f"{record.name!r}: negative value {value} for magnitude indicator {key!r}"
                )

    # ── basis derivation ─────────────────────────────────────────────────────

    def derive_basis(
        self,
        records: Iterable[StateRecord],
        percentile_cap: float = float(DEFAULT_PERCENTILE_CAP),
    ) -> NormalizationBasis:
        """Compute per-indicator reference values over a cohort.

        Args:
            records: Every record of the cohort.
            percentile_cap: Percentile (0, 100] used as the normalization ceiling.

        Returns:
            NormalizationBasis; invalid records are listed in ``excluded``.
        """
        cap = to_decimal(percentile_cap)
        if cap <= ZERO or cap > Decimal(100):
            raise ValueError(f"percentile_cap must be in (0, 100], got {percentile_cap}")

        cohort = list(records)
        valid: List[StateRecord] = []
        excluded: Dict[str, str] = {}
        for record in cohort:
            try:
                self.check_record(record)
            except (NormalizationError, RecordError) as exc:
                excluded[record.name] = str(exc)
                logger.warning("record_excluded_from_basis", entity=record.name, reason=str(exc))
                continue
            valid.append(record)

        entries: Dict[str, BasisEntry] = {}
        for domain in self.schema.domains:
            for sub in domain.sub_indicators:
                observed = [
                    to_decimal(r.indicators[sub.key])
                    for r in valid
                    if sub.key in r.indicators
                ]
                entries[sub.key] = self._entry(sub.key, observed, sub.invert, cap)

        basis = NormalizationBasis(
            schema_fingerprint=self.schema.fingerprint,
            percentile_cap=cap,
            entries=entries,
            cohort_size=len(valid),
            excluded=excluded,
        )
        logger.info(
            "basis_derived",
            cohort_size=len(cohort),
            valid=len(valid),
            excluded=len(excluded),
            percentile_cap=float(cap),
        )
        return basis

    @staticmethod
    def _entry(key: str, observed: List[Decimal], invert: bool, cap: Decimal) -> BasisEntry:
        if not observed:
            return BasisEntry(key, ZERO, ZERO, ZERO, 0, invert)
        hi, lo = max(observed), min(observed)
        if invert:
            observed = [reflect(v, hi, lo) for v in observed]
        return BasisEntry(
            key=key,
            reference=percentile(observed, cap),
            cohort_max=hi,
            cohort_min=lo,
            observations=len(observed),
            inverted=invert,
        )

    # ── record normalization ─────────────────────────────────────────────────

    def normalize_record(
        self,
        record: StateRecord,
        basis: NormalizationBasis,
    ) -> Tuple[Dict[str, Decimal], Tuple[str, ...]]:
        """Normalize every indicator present in ``record``.

        Returns:
            (normalized values for present keys, missing keys in schema order)

        Raises:
            NormalizationError / RecordError: ``record`` is invalid, or
                ``basis`` was derived under a different schema.
        """
        if basis.schema_fingerprint != self.schema.fingerprint:
            raise NormalizationError("Normalization basis was derived under a different schema")
        self.check_record(record)

        values: Dict[str, Decimal] = {}
        missing: List[str] = []
        for key in self.schema.indicator_keys:
            if key not in record.indicators:
                missing.append(key)
                continue
            entry = basis.entry(key)
            values[key] = normalize(
                to_decimal(record.indicators[key]),
                entry.reference,
                use_log_scale=self.config.uses_log(key),
                invert=entry.inverted,
                cohort_max=entry.cohort_max,
                cohort_min=entry.cohort_min,
            )
        return values, tuple(missing)
