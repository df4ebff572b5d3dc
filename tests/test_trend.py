"""Tests for trend classification."""

import math

import pytest

from glucos.core.numeric import OutOfDomainError
from glucos.models.events import TrendDirection
from glucos.services.trend import classify_trend, trend_description


class TestClassifyTrend:
    """Tests for the rate to trend mapping."""

    @pytest.mark.parametrize(
        ("rate", "expected"),
        [
            (2.5, TrendDirection.DOUBLE_UP),
            (1.5, TrendDirection.UP),
            (0.0, TrendDirection.STEADY),
            (-1.5, TrendDirection.DOWN),
            (-3.0, TrendDirection.DOUBLE_DOWN),
        ],
    )
    def test_buckets(self, rate, expected):
        assert classify_trend(rate) is expected

    @pytest.mark.parametrize(
        ("rate", "expected"),
        [
            (1.0, TrendDirection.STEADY),
            (-1.0, TrendDirection.STEADY),
            (2.0, TrendDirection.UP),
            (-2.0, TrendDirection.DOWN),
        ],
    )
    def test_boundaries_fall_into_less_severe_bucket(self, rate, expected):
        """Exact cut points are not escalated."""
        assert classify_trend(rate) is expected

    def test_classifier_is_monotonic(self):
        """A larger rate never yields a lower trend."""
        order = [
            TrendDirection.DOUBLE_DOWN,
            TrendDirection.DOWN,
            TrendDirection.STEADY,
            TrendDirection.UP,
            TrendDirection.DOUBLE_UP,
        ]
        ranks = [order.index(classify_trend(r / 10)) for r in range(-40, 41)]
        assert ranks == sorted(ranks)

    @pytest.mark.parametrize("rate", [math.nan, math.inf, -math.inf])
    def test_non_finite_rate_rejected(self, rate):
        with pytest.raises(OutOfDomainError):
            classify_trend(rate)


class TestTrendDescription:
    """Tests for human-readable trend text."""

    def test_description(self):
        assert trend_description(TrendDirection.DOWN) == "↓ falling"

    def test_unknown(self):
        assert trend_description(None) == "unknown"
