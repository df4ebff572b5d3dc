# Event and persistence models
from glucos.models.base import Base
from glucos.models.events import (
    DoseKind,
    Event,
    EventKind,
    GlucoseReading,
    MealEvent,
    MedicationDose,
    TrendDirection,
)
from glucos.models.snapshot import (
    GlucoseReadingRecord,
    MealEventRecord,
    MedicationDoseRecord,
)

__all__ = [
    "Base",
    "DoseKind",
    "Event",
    "EventKind",
    "GlucoseReading",
    "GlucoseReadingRecord",
    "MealEvent",
    "MealEventRecord",
    "MedicationDose",
    "MedicationDoseRecord",
    "TrendDirection",
]
