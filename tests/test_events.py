"""Tests for monitoring event validation."""

import math
from datetime import datetime, timedelta

import pytest

from glucos.core.numeric import OutOfDomainError
from glucos.models.events import (
    DoseKind,
    GlucoseReading,
    MealEvent,
    MedicationDose,
    TrendDirection,
)

from conftest import FIXED_NOW


class TestGlucoseReading:
    """Tests for glucose reading construction."""

    def test_valid_reading(self):
        reading = GlucoseReading(
            timestamp=FIXED_NOW, value=120, trend="up", insulin_on_board=1.5
        )
        assert reading.trend is TrendDirection.UP
        assert reading.insulin_on_board == 1.5

    @pytest.mark.parametrize("value", [40, 400])
    def test_range_bounds_accepted(self, value):
        """Sensor range is inclusive at both ends."""
        reading = GlucoseReading(
            timestamp=FIXED_NOW, value=value, trend="steady", insulin_on_board=0
        )
        assert reading.value == value

    @pytest.mark.parametrize("value", [39, 401, 0, -5])
    def test_out_of_range_rejected(self, value):
        with pytest.raises(OutOfDomainError):
            GlucoseReading(
                timestamp=FIXED_NOW, value=value, trend="steady", insulin_on_board=0
            )

    def test_non_integer_value_rejected(self):
        with pytest.raises(OutOfDomainError):
            GlucoseReading(
                timestamp=FIXED_NOW, value=120.5, trend="steady", insulin_on_board=0
            )

    def test_unknown_trend_rejected(self):
        with pytest.raises(OutOfDomainError):
            GlucoseReading(
                timestamp=FIXED_NOW, value=120, trend="sideways", insulin_on_board=0
            )

    @pytest.mark.parametrize("iob", [-0.1, math.nan, math.inf])
    def test_invalid_iob_rejected(self, iob):
        with pytest.raises(OutOfDomainError):
            GlucoseReading(
                timestamp=FIXED_NOW, value=120, trend="steady", insulin_on_board=iob
            )

    def test_naive_timestamp_rejected(self):
        """Timestamps must carry a time zone."""
        with pytest.raises(OutOfDomainError):
            GlucoseReading(
                timestamp=datetime(2026, 3, 10, 10, 0),
                value=120,
                trend="steady",
                insulin_on_board=0,
            )

    def test_reading_is_immutable(self):
        reading = GlucoseReading(
            timestamp=FIXED_NOW, value=120, trend="steady", insulin_on_board=0
        )
        with pytest.raises(AttributeError):
            reading.value = 130


class TestMealEvent:
    """Tests for meal construction."""

    def test_macros_are_optional(self):
        meal = MealEvent(timestamp=FIXED_NOW, description="Apple")
        assert meal.carbs is None

    def test_empty_description_rejected(self):
        with pytest.raises(OutOfDomainError):
            MealEvent(timestamp=FIXED_NOW, description="   ")

    def test_negative_carbs_rejected(self):
        with pytest.raises(OutOfDomainError):
            MealEvent(timestamp=FIXED_NOW, description="Toast", carbs=-1)


class TestMedicationDose:
    """Tests for dose construction."""

    def test_dose_kind_coerced(self):
        dose = MedicationDose(
            timestamp=FIXED_NOW - timedelta(hours=1), dose_kind="basal", units=24
        )
        assert dose.dose_kind is DoseKind.BASAL
        assert dose.units == 24.0

    @pytest.mark.parametrize("units", [0, -2, math.nan])
    def test_non_positive_units_rejected(self, units):
        with pytest.raises(OutOfDomainError):
            MedicationDose(timestamp=FIXED_NOW, dose_kind="bolus", units=units)

    def test_unknown_dose_kind_rejected(self):
        with pytest.raises(OutOfDomainError):
            MedicationDose(timestamp=FIXED_NOW, dose_kind="correction", units=2)
