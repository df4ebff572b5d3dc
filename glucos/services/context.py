"""Patient context for the external AI assistants.

Read-only bundle of recent history, insulin on board, profile and weekly
statistics. Producing it never mutates the event store.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from glucos.core.constants import DEFAULT_STATS_WINDOW
from glucos.models.events import EventKind, GlucoseReading, MealEvent
from glucos.services.monitor import PatientMonitor
from glucos.services.profile import PatientProfile
from glucos.services.statistics import GlucoseStatistics

RECENT_READINGS_WINDOW = timedelta(hours=4)
RECENT_MEALS_WINDOW = timedelta(hours=8)


@dataclass(frozen=True)
class PatientContext:
    generated_at: datetime
    recent_readings: list[GlucoseReading]
    recent_meals: list[MealEvent]
    current_iob: float
    profile: PatientProfile
    statistics: GlucoseStatistics


def build_patient_context(monitor: PatientMonitor) -> PatientContext:
    """Collect the context handed to the assistants.

    Readings cover the last 4 hours, meals the last 8 hours and the
    statistics the last 7 days.
    """
    return PatientContext(
        generated_at=monitor.store.clock(),
        recent_readings=monitor.query(EventKind.GLUCOSE, since=RECENT_READINGS_WINDOW),
        recent_meals=monitor.query(EventKind.MEAL, since=RECENT_MEALS_WINDOW),
        current_iob=round(monitor.current_iob(), 2),
        profile=monitor.profile,
        statistics=monitor.summarize(DEFAULT_STATS_WINDOW),
    )
