"""Tests for the sliding-window statistics aggregator."""

from datetime import timedelta

import pytest

from glucos.core.numeric import percentage, round_half_up
from glucos.models.events import (
    DoseKind,
    EventKind,
    GlucoseReading,
    MealEvent,
    MedicationDose,
)
from glucos.services.event_store import EventStore
from glucos.services.statistics import GlucoseStatistics, summarize

from conftest import FIXED_NOW


def add_readings(store: EventStore, values: list[int], minutes_apart: int = 5):
    for i, value in enumerate(reversed(values)):
        store.append(
            GlucoseReading(
                timestamp=FIXED_NOW - timedelta(minutes=i * minutes_apart),
                value=value,
                trend="steady",
                insulin_on_board=0.0,
            )
        )


class TestSummarize:
    """Tests for the summary metrics."""

    def test_reference_example(self, store: EventStore):
        """70 is in range (inclusive); 190 and 300 are above; none below."""
        add_readings(store, [70, 100, 100, 190, 300])

        stats = summarize(store)

        assert stats.time_in_range_pct == 60
        assert stats.time_above_pct == 40
        assert stats.time_below_pct == 0
        assert stats.hypo_event_count == 0
        assert stats.hyper_event_count == 1
        assert stats.reading_count == 5
        assert stats.avg_bgl == 152

    def test_below_range(self, store: EventStore):
        add_readings(store, [60, 65, 120, 130, 300])

        stats = summarize(store)

        assert stats.time_below_pct == 40
        assert stats.time_in_range_pct == 40
        assert stats.time_above_pct == 20
        assert stats.hypo_event_count == 2
        assert stats.hyper_event_count == 1

    def test_hyper_event_stricter_than_above_range(self, store: EventStore):
        """200 is above range but not a hyper event."""
        add_readings(store, [200, 250, 251])

        stats = summarize(store)

        assert stats.time_above_pct == 100
        assert stats.hyper_event_count == 1

    def test_empty_window_is_all_zero(self, store: EventStore):
        """No readings -> every field is zero, including carbs and insulin."""
        store.append(
            MealEvent(timestamp=FIXED_NOW, description="Toast", carbs=30)
        )
        assert summarize(store) == GlucoseStatistics()

    def test_window_excludes_old_readings(self, store: EventStore):
        add_readings(store, [300])
        store.append(
            GlucoseReading(
                timestamp=FIXED_NOW - timedelta(days=8),
                value=50,
                trend="steady",
                insulin_on_board=0.0,
            )
        )

        stats = summarize(store, timedelta(days=7))

        assert stats.reading_count == 1
        assert stats.hypo_event_count == 0

    def test_meals_and_insulin(self, store: EventStore):
        add_readings(store, [120])
        store.append(MealEvent(timestamp=FIXED_NOW, description="A", carbs=45))
        store.append(MealEvent(timestamp=FIXED_NOW, description="B", carbs=60))
        store.append(MealEvent(timestamp=FIXED_NOW, description="C"))
        store.append(
            MedicationDose(timestamp=FIXED_NOW, dose_kind=DoseKind.BOLUS, units=4.25)
        )
        store.append(
            MedicationDose(timestamp=FIXED_NOW, dose_kind=DoseKind.BASAL, units=24)
        )

        stats = summarize(store)

        # Meals without carbs count as zero
        assert stats.avg_carbs_per_meal == 35
        assert stats.total_insulin_units == 28.3

    def test_streams_share_one_window(self):
        """Meals and doses use the same cutoff as readings under a live clock."""
        calls = []

        def ticking_clock():
            # Each call is one second later than the previous one
            calls.append(None)
            return FIXED_NOW + timedelta(seconds=len(calls) - 1)

        store = EventStore(clock=ticking_clock)
        boundary = FIXED_NOW - timedelta(hours=24)
        store.append(
            GlucoseReading(
                timestamp=boundary, value=120, trend="steady", insulin_on_board=0.0
            )
        )
        store.append(MealEvent(timestamp=boundary, description="Late dinner", carbs=50))
        store.append(
            MedicationDose(timestamp=boundary, dose_kind=DoseKind.BOLUS, units=5.0)
        )

        stats = summarize(store, timedelta(hours=24))

        assert stats.reading_count == 1
        assert stats.avg_carbs_per_meal == 50
        assert stats.total_insulin_units == 5.0

    def test_summarize_does_not_mutate_store(self, store: EventStore):
        add_readings(store, [100, 110])
        before = store.snapshot()
        summarize(store)
        assert store.snapshot() == before
        assert store.count(EventKind.GLUCOSE) == 2

    def test_percentages_sum_to_about_100(self, store: EventStore):
        add_readings(store, [60, 120, 200])
        stats = summarize(store)
        total = stats.time_in_range_pct + stats.time_above_pct + stats.time_below_pct
        assert 99 <= total <= 101


class TestRounding:
    """Tests for the half-up rounding helpers."""

    @pytest.mark.parametrize(
        ("count", "total", "expected"),
        [(1, 8, 13), (1, 3, 33), (2, 3, 67), (0, 0, 0), (5, 5, 100)],
    )
    def test_percentage(self, count, total, expected):
        assert percentage(count, total) == expected

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3.0
        assert round_half_up(12.25, 1) == 12.3
