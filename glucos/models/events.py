"""Monitoring event model.

Immutable in-memory events held by the event store: glucose readings,
meal logs and medication doses. Validation happens at construction, so a
malformed event can never reach the store.
"""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar

from glucos.core.constants import MAX_READING_MGDL, MIN_READING_MGDL
from glucos.core.numeric import (
    OutOfDomainError,
    require_finite,
    require_non_negative,
)


class TrendDirection(str, enum.Enum):
    """Discrete glucose trend derived from the rate of change."""

    DOUBLE_UP = "double_up"  # Rising fast (>2 mg/dL/min)
    UP = "up"  # Rising (>1 mg/dL/min)
    STEADY = "steady"  # Stable (-1 to +1 mg/dL/min, inclusive)
    DOWN = "down"  # Falling (<-1 mg/dL/min)
    DOUBLE_DOWN = "double_down"  # Falling fast (<-2 mg/dL/min)


class DoseKind(str, enum.Enum):
    """Insulin dose type. Only boluses decay into insulin-on-board."""

    BASAL = "basal"
    BOLUS = "bolus"


class EventKind(str, enum.Enum):
    """Event streams kept by the event store."""

    GLUCOSE = "glucose"
    MEAL = "meal"
    MEDICATION = "medication"


def _require_aware(timestamp: datetime) -> None:
    if not isinstance(timestamp, datetime):
        raise OutOfDomainError(f"timestamp must be a datetime, got {timestamp!r}")
    if timestamp.tzinfo is None or timestamp.utcoffset() is None:
        raise OutOfDomainError("timestamp must be timezone-aware")


def _optional_grams(name: str, value: float | None) -> None:
    if value is not None:
        require_non_negative(name, value)


@dataclass(frozen=True)
class GlucoseReading:
    """One glucose measurement, synthetic or manually entered."""

    kind: ClassVar[EventKind] = EventKind.GLUCOSE

    timestamp: datetime
    value: int
    trend: TrendDirection
    insulin_on_board: float
    note: str | None = None

    def __post_init__(self) -> None:
        _require_aware(self.timestamp)
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise OutOfDomainError(f"value must be an integer, got {self.value!r}")
        if not MIN_READING_MGDL <= self.value <= MAX_READING_MGDL:
            raise OutOfDomainError(
                f"value must be within [{MIN_READING_MGDL}, {MAX_READING_MGDL}] "
                f"mg/dL, got {self.value}"
            )
        try:
            trend = TrendDirection(self.trend)
        except ValueError as e:
            raise OutOfDomainError(f"unknown trend {self.trend!r}") from e
        object.__setattr__(self, "trend", trend)
        object.__setattr__(
            self,
            "insulin_on_board",
            require_non_negative("insulin_on_board", self.insulin_on_board),
        )


@dataclass(frozen=True)
class MealEvent:
    """A logged meal with optional macro breakdown."""

    kind: ClassVar[EventKind] = EventKind.MEAL

    timestamp: datetime
    description: str
    carbs: float | None = None
    protein: float | None = None
    fat: float | None = None
    insulin_dose: float | None = None

    def __post_init__(self) -> None:
        _require_aware(self.timestamp)
        if not self.description or not self.description.strip():
            raise OutOfDomainError("meal description must not be empty")
        _optional_grams("carbs", self.carbs)
        _optional_grams("protein", self.protein)
        _optional_grams("fat", self.fat)
        _optional_grams("insulin_dose", self.insulin_dose)


@dataclass(frozen=True)
class MedicationDose:
    """An insulin dose."""

    kind: ClassVar[EventKind] = EventKind.MEDICATION

    timestamp: datetime
    dose_kind: DoseKind
    units: float
    note: str | None = None

    def __post_init__(self) -> None:
        _require_aware(self.timestamp)
        try:
            dose_kind = DoseKind(self.dose_kind)
        except ValueError as e:
            raise OutOfDomainError(f"unknown dose kind {self.dose_kind!r}") from e
        object.__setattr__(self, "dose_kind", dose_kind)
        units = require_finite("units", self.units)
        if units <= 0:
            raise OutOfDomainError(f"units must be positive, got {units!r}")
        object.__setattr__(self, "units", units)


Event = GlucoseReading | MealEvent | MedicationDose
