"""Decimal utilities for the scoring engine.

All score calculations use Decimal arithmetic so that weight sums and
proportionality checks are not disturbed by floating-point accumulation.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Sequence

ZERO = Decimal(0)
ONE = Decimal(1)
HUNDRED = Decimal(100)


def to_decimal(value: float, places: Optional[int] = None) -> Decimal:
    """Convert a number to Decimal, optionally quantized with ROUND_HALF_UP.

    Args:
        value: Numeric value to convert.
        places: Number of decimal places to quantize to. ``None`` keeps the
                exact decimal representation of ``value``.

    Returns:
        Decimal value.
    """
    dec = value if isinstance(value, Decimal) else Decimal(str(value))
    if places is None:
        return dec
    return dec.quantize(Decimal(10) ** -places, rounding=ROUND_HALF_UP)


def clamp(
    value: Decimal,
    min_val: Decimal = ZERO,
    max_val: Decimal = ONE,
) -> Decimal:
    """Clamp a Decimal value to [min_val, max_val] (default [0, 1])."""
    return max(min_val, min(max_val, value))


def safe_ratio(numerator: Decimal, denominator: Decimal) -> Decimal:
    """numerator / denominator, or 0 when the denominator is not positive."""
    if denominator <= ZERO:
        return ZERO
    return numerator / denominator


def percentile(values: Sequence[Decimal], pct: Decimal) -> Decimal:
    """Percentile of ``values`` using linear interpolation between order statistics.

    ``pct`` is expressed on a 0–100 scale. With ``pct == 100`` the result is
    the maximum; with a single value the result is that value.

    Args:
        values: Observations (need not be sorted).
        pct: Percentile in [0, 100].

    Returns:
        Interpolated percentile, or 0 for an empty sequence.

    Raises:
        ValueError: If ``pct`` is outside [0, 100].
    """
    if pct < ZERO or pct > HUNDRED:
        raise ValueError(f"percentile must be in [0, 100], got {pct}")
    if not values:
        return ZERO
    ordered = sorted(values)
    rank = (pct / HUNDRED) * (len(ordered) - 1)
    lower = int(rank)
    upper = min(lower + 1, len(ordered) - 1)
    fraction = rank - lower
    return ordered[lower] + (ordered[upper] - ordered[lower]) * fraction


def percentile_rank(value: Decimal, population: Sequence[Decimal]) -> Decimal:
    """Share (0–100) of ``population`` at or below ``value``.

    Returns 0 for an empty population.
    """
    if not population:
        return ZERO
    at_or_below = sum(1 for v in population if v <= value)
    return Decimal(at_or_below) / Decimal(len(population)) * HUNDRED
