"""Bounded, time-ordered event store.

Holds the three event streams (glucose readings, meal logs, medication
doses) in memory. It is the only mutable shared resource of a patient
monitor: every other service reads snapshots from it.

Writers and readers are serialized through a single lock, so a query never
observes a partially applied append and always returns an independent copy.
"""

import threading
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from glucos.logging_config import get_logger
from glucos.models.events import (
    Event,
    EventKind,
    GlucoseReading,
    MealEvent,
    MedicationDose,
)

logger = get_logger(__name__)

DEFAULT_RETENTION_LIMIT = 1000


def utc_now() -> datetime:
    """Default wall clock for the monitoring services."""
    return datetime.now(UTC)


@dataclass(frozen=True)
class StoreSnapshot:
    """Point-in-time copy of every stream, oldest first."""

    readings: tuple[GlucoseReading, ...] = ()
    meals: tuple[MealEvent, ...] = ()
    doses: tuple[MedicationDose, ...] = ()

    def events(self, kind: EventKind) -> tuple[Event, ...]:
        """Return the events of one stream."""
        if kind is EventKind.GLUCOSE:
            return self.readings
        if kind is EventKind.MEAL:
            return self.meals
        return self.doses


class EventStore:
    """Append-only, bounded log of monitoring events.

    Each stream keeps at most its configured number of events; once the
    bound is reached the oldest event is evicted silently (FIFO).
    """

    def __init__(
        self,
        glucose_limit: int = DEFAULT_RETENTION_LIMIT,
        meal_limit: int = DEFAULT_RETENTION_LIMIT,
        medication_limit: int = DEFAULT_RETENTION_LIMIT,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        limits = {
            EventKind.GLUCOSE: glucose_limit,
            EventKind.MEAL: meal_limit,
            EventKind.MEDICATION: medication_limit,
        }
        for kind, limit in limits.items():
            if limit <= 0:
                raise ValueError(f"Retention limit for {kind.value} must be positive")

        self._limits = limits
        self._streams: dict[EventKind, deque[Event]] = {
            kind: deque(maxlen=limit) for kind, limit in limits.items()
        }
        self._lock = threading.Lock()
        self._clock = clock

    @property
    def clock(self) -> Callable[[], datetime]:
        return self._clock

    def limit(self, kind: EventKind) -> int:
        """Return the retention bound of a stream."""
        return self._limits[kind]

    def append(self, event: Event) -> None:
        """Append an event to its stream.

        The event is visible to every query issued after this returns.
        An event older than the stream tail is placed at its ordered
        position so storage order always matches timestamp order.
        """
        if not isinstance(event, (GlucoseReading, MealEvent, MedicationDose)):
            raise TypeError(f"Unsupported event type: {type(event).__name__}")

        with self._lock:
            stream = self._streams[event.kind]
            full = len(stream) == stream.maxlen

            if full and event.timestamp < stream[0].timestamp:
                # Older than everything retained: it would be the next eviction.
                logger.debug(
                    "Dropped event older than retention window",
                    kind=event.kind.value,
                    timestamp=event.timestamp.isoformat(),
                )
                return

            if full:
                evicted = stream.popleft()
                logger.debug(
                    "Evicted oldest event",
                    kind=event.kind.value,
                    evicted_timestamp=evicted.timestamp.isoformat(),
                )

            if not stream or stream[-1].timestamp <= event.timestamp:
                stream.append(event)
            else:
                index = len(stream)
                while index > 0 and stream[index - 1].timestamp > event.timestamp:
                    index -= 1
                stream.insert(index, event)

    def query(
        self,
        kind: EventKind,
        since: timedelta | datetime | None = None,
    ) -> list[Event]:
        """Return events of one kind newer than a cutoff, oldest first.

        Args:
            kind: Stream to read.
            since: Lookback window relative to now, or an absolute cutoff.
                   ``None`` returns the whole stream.

        Returns:
            A new list; later appends do not affect it.
        """
        if since is None:
            cutoff = None
        elif isinstance(since, datetime):
            cutoff = since
        else:
            cutoff = self._clock() - since

        with self._lock:
            stream = self._streams[kind]
            if cutoff is None:
                return list(stream)

            newest_first: list[Event] = []
            for event in reversed(stream):
                if event.timestamp < cutoff:
                    break
                newest_first.append(event)

        newest_first.reverse()
        return newest_first

    def latest(self, kind: EventKind) -> Event | None:
        """Return the most recent event of a kind, or None if empty."""
        with self._lock:
            stream = self._streams[kind]
            return stream[-1] if stream else None

    def count(self, kind: EventKind) -> int:
        with self._lock:
            return len(self._streams[kind])

    def snapshot(self) -> StoreSnapshot:
        """Copy every stream for serialization."""
        with self._lock:
            return StoreSnapshot(
                readings=tuple(self._streams[EventKind.GLUCOSE]),
                meals=tuple(self._streams[EventKind.MEAL]),
                doses=tuple(self._streams[EventKind.MEDICATION]),
            )

    def restore(self, snapshot: StoreSnapshot) -> dict[str, int]:
        """Replace the store contents with a snapshot.

        Events are sorted by timestamp (stable, so equal timestamps keep
        their stored order) and each stream is truncated to its newest
        ``limit`` events.

        Returns:
            Number of events restored per kind.
        """
        restored: dict[str, int] = {}
        streams: dict[EventKind, deque[Event]] = {}
        for kind, limit in self._limits.items():
            ordered = _ordered(snapshot.events(kind))
            streams[kind] = deque(ordered[-limit:], maxlen=limit)
            restored[kind.value] = len(streams[kind])

        with self._lock:
            self._streams = streams

        logger.info("Event store restored", **restored)
        return restored

    def clear(self) -> None:
        """Drop every event (process reset)."""
        with self._lock:
            for stream in self._streams.values():
                stream.clear()
        logger.info("Event store cleared")

    def prune_older_than(self, max_age: timedelta) -> dict[str, int]:
        """Delete events older than ``max_age``.

        Returns:
            Number of events removed per kind.
        """
        cutoff = self._clock() - max_age
        removed: dict[str, int] = {}
        with self._lock:
            for kind, stream in self._streams.items():
                count = 0
                while stream and stream[0].timestamp < cutoff:
                    stream.popleft()
                    count += 1
                removed[kind.value] = count
        return removed


def _ordered(events: Iterable[Event]) -> list[Event]:
    return sorted(events, key=lambda event: event.timestamp)
