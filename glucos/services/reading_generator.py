"""Synthetic CGM reading generator.

Produces one glucose reading per interval from the current value, the hour
of day, recent meals and the current insulin on board, then runs it through
trend classification and the alert engine.

Each generator owns its state object and its own APScheduler ticker, so
several simulated patients can run side by side in one process.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from random import Random
from typing import Protocol

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from glucos.core.constants import (
    INSULIN_ACTIVE_WINDOW,
    IOB_GLUCOSE_PULL,
    MAX_READING_MGDL,
    MEAN_REVERSION_HIGH,
    MEAN_REVERSION_LOW,
    MEAN_REVERSION_STEP,
    MIN_READING_MGDL,
    RECENT_MEAL_WINDOW,
)
from glucos.core.numeric import round_half_up
from glucos.logging_config import get_logger
from glucos.models.events import EventKind, GlucoseReading, TrendDirection
from glucos.services.alert_engine import AlertVerdict, evaluate
from glucos.services.event_store import EventStore
from glucos.services.insulin_decay import compute_iob
from glucos.services.notifier import NotificationDispatcher
from glucos.services.profile import PatientProfile
from glucos.services.trend import classify_trend

logger = get_logger(__name__)

DEFAULT_INTERVAL_MINUTES = 5
DEFAULT_INITIAL_BGL = 120.0

# Local hours with physiological drift
DAWN_HOURS = range(5, 8)  # 05:00-07:59, dawn phenomenon
LUNCH_HOURS = range(12, 14)  # 12:00-13:59

GENERATOR_JOB_ID = "reading_generator"


class RandomSource(Protocol):
    """Anything with ``random.Random.uniform`` semantics."""

    def uniform(self, a: float, b: float) -> float: ...


@dataclass
class GeneratorState:
    """Mutable simulator state owned by one generator."""

    current_value: float = DEFAULT_INITIAL_BGL
    current_trend: TrendDirection = TrendDirection.STEADY


@dataclass(frozen=True)
class GlucoseChange:
    """Breakdown of one cycle's glucose change in mg/dL."""

    base_drift: float
    meal_effect: float
    insulin_effect: float
    mean_reversion: float
    noise: float

    @property
    def total(self) -> float:
        return (
            self.base_drift
            + self.meal_effect
            + self.insulin_effect
            + self.mean_reversion
            + self.noise
        )


@dataclass(frozen=True)
class CycleResult:
    """A reading appended to the store and the alert verdict it produced."""

    reading: GlucoseReading
    verdict: AlertVerdict


@dataclass(frozen=True)
class CurrentReading:
    """Current simulator value with live insulin on board."""

    value: int
    trend: TrendDirection
    insulin_on_board: float
    timestamp: datetime


def base_drift(hour: int, rng: RandomSource) -> float:
    """Physiological drift for the local hour of day."""
    if hour in DAWN_HOURS:
        return rng.uniform(1.0, 4.0)
    if hour in LUNCH_HOURS:
        return rng.uniform(0.0, 2.0)
    return rng.uniform(-1.0, 1.0)


def calculate_change(
    current_value: float,
    hour: int,
    recent_meal: bool,
    iob: float,
    rng: RandomSource,
) -> GlucoseChange:
    """Compute the glucose change for one generation cycle.

    Random draws happen in a fixed order (drift, meal spike, noise) so a
    seeded source reproduces the same series.

    Args:
        current_value: Current glucose in mg/dL.
        hour: Local hour of day (0-23).
        recent_meal: Whether a meal was logged within the last hour.
        iob: Current insulin on board in units.
        rng: Random source.

    Returns:
        GlucoseChange with each contribution.
    """
    drift = base_drift(hour, rng)
    meal_effect = rng.uniform(2.0, 7.0) if recent_meal else 0.0
    insulin_effect = -iob * IOB_GLUCOSE_PULL

    if current_value > MEAN_REVERSION_HIGH:
        reversion = -MEAN_REVERSION_STEP
    elif current_value < MEAN_REVERSION_LOW:
        reversion = MEAN_REVERSION_STEP
    else:
        reversion = 0.0

    noise = rng.uniform(-1.0, 1.0)

    return GlucoseChange(
        base_drift=drift,
        meal_effect=meal_effect,
        insulin_effect=insulin_effect,
        mean_reversion=reversion,
        noise=noise,
    )


def clamp_reading(value: float) -> float:
    """Clamp a glucose value into the sensor range."""
    return max(float(MIN_READING_MGDL), min(float(MAX_READING_MGDL), value))


class ReadingGenerator:
    """Stateful periodic producer of synthetic glucose readings.

    Lifecycle: stopped -> running on ``start()``, running -> stopped on
    ``stop()``; both are idempotent. ``start()`` must be called from within
    a running asyncio event loop, which hosts the ticker.
    """

    def __init__(
        self,
        store: EventStore,
        dispatcher: NotificationDispatcher | None = None,
        *,
        interval_minutes: int = DEFAULT_INTERVAL_MINUTES,
        initial_value: float = DEFAULT_INITIAL_BGL,
        rng: RandomSource | None = None,
        timezone: tzinfo = UTC,
        profile: PatientProfile | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if interval_minutes <= 0:
            raise ValueError("interval_minutes must be positive")

        self.store = store
        self.dispatcher = dispatcher
        self.interval_minutes = interval_minutes
        self.rng: RandomSource = rng or Random()
        self.timezone = timezone
        self.profile = profile
        self.clock = clock or store.clock
        self.state = GeneratorState(current_value=clamp_reading(initial_value))

        # Guards the running flag and scheduler handle
        self._lifecycle_lock = threading.Lock()
        # Serializes state updates between ticks and manual entries
        self._cycle_lock = threading.Lock()
        self._scheduler: AsyncIOScheduler | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> bool:
        """Start periodic generation and produce the first reading now.

        Returns:
            True if the generator was started, False if already running.
        """
        with self._lifecycle_lock:
            if self._running:
                logger.debug("Reading generator already running")
                return False

            self._seed_from_store()

            scheduler = AsyncIOScheduler(timezone=UTC)
            scheduler.add_job(
                self._tick,
                trigger=IntervalTrigger(minutes=self.interval_minutes),
                id=GENERATOR_JOB_ID,
                name="Synthetic CGM Reading",
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )
            scheduler.start()
            self._scheduler = scheduler
            self._running = True

        logger.info(
            "Reading generator started",
            interval_minutes=self.interval_minutes,
            current_value=round(self.state.current_value, 1),
        )
        self._run_cycle()
        return True

    def stop(self) -> bool:
        """Stop periodic generation.

        No new cycle starts after this returns; a cycle already in flight
        may still complete its append.

        Returns:
            True if the generator was stopped, False if it was not running.
        """
        with self._lifecycle_lock:
            if not self._running:
                return False
            self._running = False
            scheduler, self._scheduler = self._scheduler, None

        if scheduler is not None:
            scheduler.shutdown(wait=False)
        logger.info("Reading generator stopped")
        return True

    def scheduled_jobs(self) -> int:
        """Number of ticker jobs currently scheduled (0 when stopped)."""
        scheduler = self._scheduler
        return len(scheduler.get_jobs()) if scheduler is not None else 0

    def generate_reading(self) -> CycleResult:
        """Run one generation cycle and append its reading to the store."""
        with self._cycle_lock:
            now = self.clock()
            doses = self.store.query(
                EventKind.MEDICATION, since=now - INSULIN_ACTIVE_WINDOW
            )
            iob = compute_iob(now, doses)
            recent_meal = bool(
                self.store.query(EventKind.MEAL, since=now - RECENT_MEAL_WINDOW)
            )
            hour = now.astimezone(self.timezone).hour

            change = calculate_change(
                self.state.current_value, hour, recent_meal, iob, self.rng
            )
            self.state.current_value = clamp_reading(
                self.state.current_value + change.total
            )
            trend = classify_trend(change.total / self.interval_minutes)
            self.state.current_trend = trend

            reading = GlucoseReading(
                timestamp=now,
                value=int(round_half_up(self.state.current_value)),
                trend=trend,
                insulin_on_board=iob,
            )
            self.store.append(reading)

        logger.debug(
            "Generated glucose reading",
            value=reading.value,
            trend=reading.trend.value,
            insulin_on_board=round(iob, 2),
            change=round(change.total, 2),
            recent_meal=recent_meal,
        )
        return CycleResult(reading=reading, verdict=self._raise_alert(reading))

    def add_manual_reading(
        self,
        value: int,
        trend: TrendDirection | str,
        insulin_on_board: float,
        note: str | None = None,
    ) -> CycleResult:
        """Record an externally measured reading.

        The caller-chosen trend bypasses classification. The simulator
        state is overwritten so later synthetic cycles continue from it.

        Raises:
            OutOfDomainError: If the entry is malformed; nothing is stored.
        """
        reading = GlucoseReading(
            timestamp=self.clock(),
            value=value,
            trend=trend,
            insulin_on_board=insulin_on_board,
            note=note,
        )
        with self._cycle_lock:
            self.state.current_value = float(reading.value)
            self.state.current_trend = reading.trend
            self.store.append(reading)

        logger.info(
            "Manual glucose reading recorded",
            value=reading.value,
            trend=reading.trend.value,
        )
        return CycleResult(reading=reading, verdict=self._raise_alert(reading))

    def current_reading(self) -> CurrentReading:
        """Return the current simulated value with live IoB."""
        now = self.clock()
        doses = self.store.query(
            EventKind.MEDICATION, since=now - INSULIN_ACTIVE_WINDOW
        )
        return CurrentReading(
            value=int(round_half_up(self.state.current_value)),
            trend=self.state.current_trend,
            insulin_on_board=round(compute_iob(now, doses), 2),
            timestamp=now,
        )

    async def _tick(self) -> None:
        with self._lifecycle_lock:
            if not self._running:
                return
        self._run_cycle()

    def _run_cycle(self) -> None:
        try:
            self.generate_reading()
        except Exception as e:
            logger.exception("Glucose generation cycle failed", error=str(e))

    def _seed_from_store(self) -> None:
        latest = self.store.latest(EventKind.GLUCOSE)
        if latest is not None:
            self.state.current_value = float(latest.value)
            self.state.current_trend = latest.trend

    def _raise_alert(self, reading: GlucoseReading) -> AlertVerdict:
        verdict = evaluate(
            reading.value, reading.trend, reading.insulin_on_board, self.profile
        )
        if verdict.alert:
            logger.info(
                "Glucose alert raised",
                severity=verdict.severity.value,
                condition=verdict.condition.value if verdict.condition else None,
                value=reading.value,
                trend=reading.trend.value,
            )
            if self.dispatcher is not None:
                self.dispatcher.dispatch(
                    verdict.severity, reading.value, reading.trend, verdict.rationale
                )
        return verdict
