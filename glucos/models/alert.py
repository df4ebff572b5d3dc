"""Alert classification enums."""

import enum


class AlertSeverity(str, enum.Enum):
    """Severity tier of an alert verdict."""

    NONE = "none"
    WARNING = "warning"
    CRITICAL = "critical"


class AlertCondition(str, enum.Enum):
    """Clinical condition behind an alert."""

    HYPOGLYCEMIA = "hypoglycemia"
    HYPERGLYCEMIA = "hyperglycemia"
    LOW_WARNING = "low_warning"
    HIGH_WARNING = "high_warning"
