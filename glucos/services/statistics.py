"""Sliding-window glucose statistics.

Recomputed on demand from an event store snapshot; holds no state, so the
same store contents always produce the same summary.
"""

from dataclasses import dataclass
from datetime import timedelta

from glucos.core.constants import (
    DEFAULT_STATS_WINDOW,
    HYPER_EVENT_ABOVE,
    HYPO_EVENT_BELOW,
    RANGE_HIGH_MGDL,
    RANGE_LOW_MGDL,
)
from glucos.core.numeric import percentage, round_half_up
from glucos.models.events import EventKind
from glucos.services.event_store import EventStore


@dataclass(frozen=True)
class GlucoseStatistics:
    """Summary metrics over a lookback window."""

    avg_bgl: int = 0
    time_in_range_pct: int = 0
    time_above_pct: int = 0
    time_below_pct: int = 0
    hypo_event_count: int = 0
    hyper_event_count: int = 0
    reading_count: int = 0
    avg_carbs_per_meal: int = 0
    total_insulin_units: float = 0.0


def summarize(
    store: EventStore,
    window: timedelta = DEFAULT_STATS_WINDOW,
) -> GlucoseStatistics:
    """Summarize readings, meals and doses within the lookback window.

    In range is [70, 180] inclusive, above is > 180, below is < 70. A hyper
    event is a reading > 250, stricter than the above-range bound.
    Percentages are integers rounded half-up. With no readings in the
    window every field is zero.

    Args:
        store: Event store to read from (never mutated).
        window: Lookback duration.

    Returns:
        GlucoseStatistics for the window.
    """
    # One cutoff for all three streams
    cutoff = store.clock() - window
    readings = store.query(EventKind.GLUCOSE, since=cutoff)
    if not readings:
        return GlucoseStatistics()

    meals = store.query(EventKind.MEAL, since=cutoff)
    doses = store.query(EventKind.MEDICATION, since=cutoff)

    values = [reading.value for reading in readings]
    total = len(values)

    in_range = sum(1 for v in values if RANGE_LOW_MGDL <= v <= RANGE_HIGH_MGDL)
    above = sum(1 for v in values if v > RANGE_HIGH_MGDL)
    below = sum(1 for v in values if v < RANGE_LOW_MGDL)
    hypo_events = sum(1 for v in values if v < HYPO_EVENT_BELOW)
    hyper_events = sum(1 for v in values if v > HYPER_EVENT_ABOVE)

    total_carbs = sum(meal.carbs or 0 for meal in meals)
    avg_carbs = total_carbs / len(meals) if meals else 0
    total_insulin = sum(dose.units for dose in doses)

    return GlucoseStatistics(
        avg_bgl=int(round_half_up(sum(values) / total)),
        time_in_range_pct=percentage(in_range, total),
        time_above_pct=percentage(above, total),
        time_below_pct=percentage(below, total),
        hypo_event_count=hypo_events,
        hyper_event_count=hyper_events,
        reading_count=total,
        avg_carbs_per_meal=int(round_half_up(avg_carbs)),
        total_insulin_units=round_half_up(total_insulin, 1),
    )
