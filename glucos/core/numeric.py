"""Numeric guards and rounding shared by the monitoring services."""

import math
from decimal import ROUND_HALF_UP, Decimal


class OutOfDomainError(ValueError):
    """A pure function received a value outside its numeric domain.

    Raised for NaN, infinite or negative inputs. This is a caller
    programming error, never clamped or silently replaced by a default.
    """


def require_finite(name: str, value: float) -> float:
    """Return ``value`` as a float, raising if it is NaN or infinite."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise OutOfDomainError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise OutOfDomainError(f"{name} must be finite, got {value!r}")
    return float(value)


def require_non_negative(name: str, value: float) -> float:
    """Return ``value`` as a float, raising if it is not finite or below zero."""
    value = require_finite(name, value)
    if value < 0:
        raise OutOfDomainError(f"{name} must not be negative, got {value!r}")
    return value


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with ties away from zero for positive values (0.5 -> 1).

    Python's built-in ``round`` uses banker's rounding, which would turn
    a 12.5% bucket into 12.
    """
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def percentage(count: int, total: int) -> int:
    """Integer percentage of ``count`` over ``total``, rounded half-up.

    Computed in exact decimal arithmetic. Returns 0 when ``total`` is 0.
    """
    if total == 0:
        return 0
    ratio = Decimal(count * 100) / Decimal(total)
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))
