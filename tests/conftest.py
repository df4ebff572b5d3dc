"""Pytest configuration and shared fixtures.

Every test gets its own patient monitor driven by a fixed clock and a
deterministic random source, so generated readings are reproducible.
"""

import os
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set testing mode BEFORE importing app to use NullPool
os.environ["TESTING"] = "true"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from glucos.config import settings

# Override settings for testing
settings.testing = True

from glucos.database import close_database
from glucos.main import app
from glucos.models.alert import AlertSeverity
from glucos.models.events import TrendDirection
from glucos.services.event_store import EventStore
from glucos.services.monitor import PatientMonitor, build_monitor
from glucos.services.notifier import NotificationDeliveryError

# 10:00 UTC: outside the dawn and lunch drift windows
FIXED_NOW = datetime(2026, 3, 10, 10, 0, tzinfo=UTC)


class FixedClock:
    """Manually advanced wall clock."""

    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class MidpointRandom:
    """Random source returning the midpoint of every range.

    Queued values are returned first, in order.
    """

    def __init__(self, *values: float) -> None:
        self.values = list(values)
        self.calls: list[tuple[float, float]] = []

    def uniform(self, a: float, b: float) -> float:
        self.calls.append((a, b))
        if self.values:
            return self.values.pop(0)
        return (a + b) / 2


class RecordingSink:
    """Notification sink that records every alert."""

    def __init__(self) -> None:
        self.alerts: list[tuple[AlertSeverity, int, TrendDirection, str]] = []

    async def notify(
        self,
        severity: AlertSeverity,
        bgl: int,
        trend: TrendDirection,
        rationale: str,
    ) -> None:
        self.alerts.append((severity, bgl, trend, rationale))


class FailingSink:
    """Notification sink whose delivery always fails."""

    def __init__(self, error: Exception | None = None) -> None:
        self.error = error or NotificationDeliveryError("sink unavailable")
        self.attempts = 0

    async def notify(
        self,
        severity: AlertSeverity,
        bgl: int,
        trend: TrendDirection,
        rationale: str,
    ) -> None:
        self.attempts += 1
        raise self.error


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def rng() -> MidpointRandom:
    return MidpointRandom()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def store(clock: FixedClock) -> EventStore:
    return EventStore(clock=clock)


@pytest.fixture
def monitor(clock: FixedClock, rng: MidpointRandom, sink: RecordingSink):
    """Stopped patient monitor with deterministic collaborators."""
    patient_monitor = build_monitor(settings, sink=sink, rng=rng, clock=clock)
    yield patient_monitor
    patient_monitor.stop()


@pytest_asyncio.fixture
async def client(monitor: PatientMonitor) -> AsyncGenerator[AsyncClient, None]:
    """Provide an async HTTP client bound to the test monitor."""
    app.state.monitor = monitor
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    monitor.stop()
    await monitor.dispatcher.drain()
    del app.state.monitor
    await close_database()
