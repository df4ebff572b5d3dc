"""Glucose monitoring clinical constants.

All clinically significant values used by the monitoring core are defined
here. They are fixed design constants, not user settings: alert tiers,
statistics buckets and the insulin decay law must produce the same numbers
on every deployment.
"""

from datetime import timedelta
from typing import Final

# Sensor domain: synthetic readings are clamped into [40, 400] mg/dL, the
# reporting range of common consumer CGMs.
MIN_READING_MGDL: Final[int] = 40
MAX_READING_MGDL: Final[int] = 400

# Insulin action: a bolus decays linearly to zero over this window.
# Deliberately linear, not a bi-exponential curve.
INSULIN_ACTIVE_WINDOW: Final[timedelta] = timedelta(hours=5)

# Trend cut points (mg/dL per minute). A value exactly on a cut point
# belongs to the less severe bucket.
TREND_SINGLE_THRESHOLD: Final[float] = 1.0
TREND_DOUBLE_THRESHOLD: Final[float] = 2.0

# Alert tiers (mg/dL).
HYPO_CRITICAL_BELOW: Final[int] = 70
LOW_WARNING_BELOW: Final[int] = 80
HIGH_WARNING_ABOVE: Final[int] = 180
HYPER_CRITICAL_ABOVE: Final[int] = 250

# Statistics buckets (mg/dL). In range is [70, 180] inclusive.
# The hyper event threshold is stricter than the above-range bound; the
# two are intentionally independent.
RANGE_LOW_MGDL: Final[int] = 70
RANGE_HIGH_MGDL: Final[int] = 180
HYPO_EVENT_BELOW: Final[int] = 70
HYPER_EVENT_ABOVE: Final[int] = 250

# Generator heuristics.
IOB_GLUCOSE_PULL: Final[float] = 0.5  # mg/dL drop per unit of active insulin
MEAN_REVERSION_HIGH: Final[int] = 180
MEAN_REVERSION_LOW: Final[int] = 80
MEAN_REVERSION_STEP: Final[float] = 1.0
RECENT_MEAL_WINDOW: Final[timedelta] = timedelta(hours=1)

# Default lookback for statistics and reports (7 days).
DEFAULT_STATS_WINDOW: Final[timedelta] = timedelta(days=7)
