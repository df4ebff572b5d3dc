"""Glucose trend classification.

Maps a rate of change (mg/dL per minute) onto the five trend arrows.
Values exactly on a cut point fall into the less severe bucket so a
reading hovering at a boundary does not flap between alert tiers.
"""

from glucos.core.constants import TREND_DOUBLE_THRESHOLD, TREND_SINGLE_THRESHOLD
from glucos.core.numeric import require_finite
from glucos.models.events import TrendDirection

TREND_ARROWS: dict[TrendDirection, str] = {
    TrendDirection.DOUBLE_UP: "\u2191\u2191",  # ↑↑
    TrendDirection.UP: "\u2191",  # ↑
    TrendDirection.STEADY: "\u2192",  # →
    TrendDirection.DOWN: "\u2193",  # ↓
    TrendDirection.DOUBLE_DOWN: "\u2193\u2193",  # ↓↓
}

TREND_LABELS: dict[TrendDirection, str] = {
    TrendDirection.DOUBLE_UP: "rising fast",
    TrendDirection.UP: "rising",
    TrendDirection.STEADY: "stable",
    TrendDirection.DOWN: "falling",
    TrendDirection.DOUBLE_DOWN: "falling fast",
}


def classify_trend(delta_per_minute: float) -> TrendDirection:
    """Classify a rate of change into a trend direction.

    Args:
        delta_per_minute: Rate of change in mg/dL/min.

    Returns:
        The matching TrendDirection.

    Raises:
        OutOfDomainError: If the rate is NaN or infinite.
    """
    rate = require_finite("delta_per_minute", delta_per_minute)

    if rate > TREND_DOUBLE_THRESHOLD:
        return TrendDirection.DOUBLE_UP
    if rate > TREND_SINGLE_THRESHOLD:
        return TrendDirection.UP
    if rate < -TREND_DOUBLE_THRESHOLD:
        return TrendDirection.DOUBLE_DOWN
    if rate < -TREND_SINGLE_THRESHOLD:
        return TrendDirection.DOWN
    return TrendDirection.STEADY


def trend_description(trend: TrendDirection | None) -> str:
    """Convert a trend to a human-readable description with its arrow."""
    if trend is None:
        return "unknown"
    return f"{TREND_ARROWS[trend]} {TREND_LABELS[trend]}"
