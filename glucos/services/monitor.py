"""Patient monitor.

Explicit per-patient state object that wires one event store, one reading
generator, one notification dispatcher and one profile together. Nothing
here is process-global; the API holds a single monitor on ``app.state``.
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from random import Random
from zoneinfo import ZoneInfo

from glucos.config import Settings, settings
from glucos.core.constants import DEFAULT_STATS_WINDOW, INSULIN_ACTIVE_WINDOW
from glucos.logging_config import get_logger
from glucos.models.events import (
    DoseKind,
    Event,
    EventKind,
    MealEvent,
    MedicationDose,
    TrendDirection,
)
from glucos.services.event_store import EventStore, utc_now
from glucos.services.insulin_decay import IoBSnapshot, compute_iob, get_iob_snapshot
from glucos.services.notifier import (
    LogNotificationSink,
    NotificationDispatcher,
    NotificationSink,
    WebhookNotificationSink,
)
from glucos.services.profile import PatientProfile, get_patient_profile
from glucos.services.reading_generator import (
    CurrentReading,
    CycleResult,
    RandomSource,
    ReadingGenerator,
)
from glucos.services.statistics import GlucoseStatistics, summarize

logger = get_logger(__name__)


class PatientMonitor:
    """Monitoring core for one patient."""

    def __init__(
        self,
        store: EventStore,
        generator: ReadingGenerator,
        dispatcher: NotificationDispatcher,
        profile: PatientProfile,
    ) -> None:
        self.store = store
        self.generator = generator
        self.dispatcher = dispatcher
        self.profile = profile

    # Generator lifecycle

    def start(self) -> bool:
        return self.generator.start()

    def stop(self) -> bool:
        return self.generator.stop()

    @property
    def is_running(self) -> bool:
        return self.generator.is_running

    # Event entry

    def add_manual_reading(
        self,
        value: int,
        trend: TrendDirection | str,
        insulin_on_board: float | None = None,
        note: str | None = None,
    ) -> CycleResult:
        """Record a manual reading; IoB defaults to the live estimate."""
        if insulin_on_board is None:
            insulin_on_board = self.current_iob()
        return self.generator.add_manual_reading(value, trend, insulin_on_board, note)

    def log_meal(
        self,
        description: str,
        carbs: float | None = None,
        protein: float | None = None,
        fat: float | None = None,
        insulin_dose: float | None = None,
    ) -> MealEvent:
        meal = MealEvent(
            timestamp=self.store.clock(),
            description=description,
            carbs=carbs,
            protein=protein,
            fat=fat,
            insulin_dose=insulin_dose,
        )
        self.store.append(meal)
        logger.info("Meal logged", carbs=carbs, insulin_dose=insulin_dose)
        return meal

    def log_medication(
        self,
        dose_kind: DoseKind | str,
        units: float,
        note: str | None = None,
    ) -> MedicationDose:
        dose = MedicationDose(
            timestamp=self.store.clock(),
            dose_kind=dose_kind,
            units=units,
            note=note,
        )
        self.store.append(dose)
        logger.info("Medication logged", dose_kind=dose.dose_kind.value, units=units)
        return dose

    # Queries

    def query(
        self, kind: EventKind, since: timedelta | datetime | None = None
    ) -> list[Event]:
        return self.store.query(kind, since)

    def latest(self, kind: EventKind) -> Event | None:
        return self.store.latest(kind)

    def current_reading(self) -> CurrentReading:
        return self.generator.current_reading()

    def current_iob(self) -> float:
        now = self.store.clock()
        doses = self.store.query(
            EventKind.MEDICATION, since=now - INSULIN_ACTIVE_WINDOW
        )
        return compute_iob(now, doses)

    def iob_snapshot(self) -> IoBSnapshot:
        now = self.store.clock()
        doses = self.store.query(
            EventKind.MEDICATION, since=now - INSULIN_ACTIVE_WINDOW
        )
        return get_iob_snapshot(now, doses)

    def summarize(self, window: timedelta = DEFAULT_STATS_WINDOW) -> GlucoseStatistics:
        return summarize(self.store, window)


def build_notification_sink(config: Settings = settings) -> NotificationSink:
    """Select the notification sink from configuration."""
    if config.notification_webhook_url:
        return WebhookNotificationSink(
            config.notification_webhook_url,
            timeout=config.notification_timeout_seconds,
        )
    return LogNotificationSink()


def build_monitor(
    config: Settings = settings,
    *,
    sink: NotificationSink | None = None,
    rng: RandomSource | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> PatientMonitor:
    """Build a patient monitor from configuration.

    Args:
        config: Application settings.
        sink: Notification sink override (defaults from configuration).
        rng: Random source for the generator (defaults to ``random.Random``).
        clock: Wall clock shared by the store and the generator.

    Returns:
        A stopped PatientMonitor.
    """
    store = EventStore(
        glucose_limit=config.glucose_retention_limit,
        meal_limit=config.meal_retention_limit,
        medication_limit=config.medication_retention_limit,
        clock=clock,
    )
    dispatcher = NotificationDispatcher(sink or build_notification_sink(config))
    profile = get_patient_profile(config)
    generator = ReadingGenerator(
        store,
        dispatcher,
        interval_minutes=config.generator_interval_minutes,
        initial_value=config.generator_initial_bgl,
        rng=rng or Random(),
        timezone=ZoneInfo(config.patient_timezone),
        profile=profile,
    )
    return PatientMonitor(store, generator, dispatcher, profile)
