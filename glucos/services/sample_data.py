"""Sample data generator.

Backfills a realistic week of glucose readings, meals and insulin doses so
the statistics, context and alerting paths can be demonstrated without
waiting for the live generator. Events are timestamped in the patient's
local time and never in the future.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from random import Random

from glucos.core.numeric import round_half_up
from glucos.logging_config import get_logger
from glucos.models.events import (
    DoseKind,
    GlucoseReading,
    MealEvent,
    MedicationDose,
    TrendDirection,
)
from glucos.services.monitor import PatientMonitor
from glucos.services.reading_generator import RandomSource
from glucos.services.statistics import GlucoseStatistics

logger = get_logger(__name__)

SAMPLE_DAYS = 7
READING_STEP_MINUTES = 30

SAMPLE_BASE_BGL = 120
SAMPLE_MIN_BGL = 60
SAMPLE_MAX_BGL = 250
SAMPLE_VARIATION = 15.0


@dataclass(frozen=True)
class MealTemplate:
    description: str
    carbs: float
    protein: float
    fat: float
    insulin_dose: float

    @property
    def label(self) -> str:
        return self.description.split(":")[0]


BREAKFAST = MealTemplate("Breakfast: Oatmeal with berries", 45, 8, 5, 4.5)
LUNCH = MealTemplate("Lunch: Chicken sandwich with apple", 55, 30, 12, 5.5)
DINNER = MealTemplate("Dinner: Salmon with rice and vegetables", 60, 35, 15, 6.0)
SNACK = MealTemplate("Snack: Greek yogurt with granola", 25, 15, 8, 2.5)

# Local meal times; the snack is eaten on roughly half of the days
MEAL_PLAN: list[tuple[time, MealTemplate]] = [
    (time(8, 0), BREAKFAST),
    (time(12, 30), LUNCH),
    (time(18, 0), DINNER),
]
SNACK_TIME = time(15, 0)

BASAL_TIME = time(22, 0)
BASAL_UNITS = 24.0

# Hours with insulin still active after a meal bolus
IOB_HOURS = (range(8, 12), range(13, 17), range(19, 23))


@dataclass(frozen=True)
class SampleDataResult:
    """Counts of backfilled events and the resulting weekly statistics."""

    readings: int
    meals: int
    doses: int
    statistics: GlucoseStatistics


def sample_glucose_value(hour: int, rng: RandomSource) -> int:
    """Glucose value for a local hour: dawn rise, meal spikes, quiet nights."""
    base = SAMPLE_BASE_BGL
    if 5 <= hour < 8:
        base += 20
    if 8 <= hour <= 9 or 12 <= hour <= 13 or 18 <= hour <= 19:
        base += 40
    if hour >= 22 or hour < 6:
        base -= 10

    value = base + rng.uniform(-SAMPLE_VARIATION, SAMPLE_VARIATION)
    return int(round_half_up(max(SAMPLE_MIN_BGL, min(SAMPLE_MAX_BGL, value))))


def sample_trend(value: int, rng: RandomSource) -> TrendDirection:
    if value < 80 and rng.uniform(0, 1) > 0.5:
        return TrendDirection.DOWN
    if value > 180 and rng.uniform(0, 1) > 0.5:
        return TrendDirection.UP
    return TrendDirection.STEADY


def sample_iob(hour: int, minute: int, rng: RandomSource) -> float:
    if not any(hour in hours for hours in IOB_HOURS):
        return 0.0
    hours_after_dose = (hour % 4) + minute / 60
    initial_dose = rng.uniform(5.0, 8.0)
    return max(0.0, initial_dose * (1 - hours_after_dose / 5))


def _sample_days(now: datetime, timezone: tzinfo) -> list[date]:
    today = now.astimezone(timezone).date()
    return [today - timedelta(days=offset) for offset in range(SAMPLE_DAYS, -1, -1)]


def _at(day: date, local_time: time, timezone: tzinfo) -> datetime:
    return datetime.combine(day, local_time, tzinfo=timezone).astimezone(UTC)


def generate_sample_readings(
    now: datetime, timezone: tzinfo, rng: RandomSource
) -> Iterator[GlucoseReading]:
    """Yield one reading every 30 minutes over the last week."""
    for day in _sample_days(now, timezone):
        for minute_of_day in range(0, 24 * 60, READING_STEP_MINUTES):
            hour, minute = divmod(minute_of_day, 60)
            timestamp = _at(day, time(hour, minute), timezone)
            if timestamp > now:
                return
            value = sample_glucose_value(hour, rng)
            yield GlucoseReading(
                timestamp=timestamp,
                value=value,
                trend=sample_trend(value, rng),
                insulin_on_board=round(sample_iob(hour, minute, rng), 2),
                note="Sample data",
            )


def generate_sample_meals(
    now: datetime, timezone: tzinfo, rng: RandomSource
) -> Iterator[MealEvent]:
    """Yield breakfast, lunch and dinner each day, plus an occasional snack."""
    for day in _sample_days(now, timezone):
        plan = list(MEAL_PLAN)
        if rng.uniform(0, 1) > 0.5:
            plan.append((SNACK_TIME, SNACK))
        for local_time, meal in sorted(plan, key=lambda item: item[0]):
            timestamp = _at(day, local_time, timezone)
            if timestamp > now:
                continue
            yield MealEvent(
                timestamp=timestamp,
                description=meal.description,
                carbs=meal.carbs,
                protein=meal.protein,
                fat=meal.fat,
                insulin_dose=meal.insulin_dose,
            )


def generate_sample_doses(
    now: datetime, timezone: tzinfo
) -> Iterator[MedicationDose]:
    """Yield a meal bolus with each main meal and a nightly basal dose."""
    for day in _sample_days(now, timezone):
        doses = [
            (local_time, DoseKind.BOLUS, meal.insulin_dose, f"{meal.label} bolus")
            for local_time, meal in MEAL_PLAN
        ]
        doses.append(
            (BASAL_TIME, DoseKind.BASAL, BASAL_UNITS, "Long-acting basal insulin")
        )
        for local_time, dose_kind, units, note in doses:
            timestamp = _at(day, local_time, timezone)
            if timestamp > now:
                continue
            yield MedicationDose(
                timestamp=timestamp, dose_kind=dose_kind, units=units, note=note
            )


def populate_sample_data(
    monitor: PatientMonitor, rng: RandomSource | None = None
) -> SampleDataResult:
    """Append a week of sample events to the monitor's store.

    Existing events are kept; the store's retention bound still applies.

    Args:
        monitor: Patient monitor to populate.
        rng: Random source (defaults to ``random.Random``).

    Returns:
        SampleDataResult with event counts and 7-day statistics.
    """
    rng = rng or Random()
    now = monitor.store.clock()
    timezone = monitor.generator.timezone

    readings = list(generate_sample_readings(now, timezone, rng))
    meals = list(generate_sample_meals(now, timezone, rng))
    doses = list(generate_sample_doses(now, timezone))

    for event in (*readings, *meals, *doses):
        monitor.store.append(event)

    statistics = monitor.summarize()
    logger.info(
        "Sample data populated",
        readings=len(readings),
        meals=len(meals),
        doses=len(doses),
        avg_bgl=statistics.avg_bgl,
        time_in_range_pct=statistics.time_in_range_pct,
    )
    return SampleDataResult(
        readings=len(readings),
        meals=len(meals),
        doses=len(doses),
        statistics=statistics,
    )
