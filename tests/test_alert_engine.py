"""Tests for the threshold alert engine."""

import math

import pytest

from glucos.core.numeric import OutOfDomainError
from glucos.models.alert import AlertCondition, AlertSeverity
from glucos.models.events import TrendDirection
from glucos.services.alert_engine import (
    calculate_trajectory,
    classify_alert,
    evaluate,
)
from glucos.services.profile import PatientProfile

# ── Trajectory calculation tests ──


class TestCalculateTrajectory:
    """Tests for glucose trajectory calculation."""

    def test_flat_trajectory(self):
        """Flat trend rate should predict same value at all horizons."""
        trajectory = calculate_trajectory(100.0, 0.0)
        assert trajectory.predictions == {15: 100.0, 30: 100.0}

    def test_falling_trajectory(self):
        trajectory = calculate_trajectory(100.0, -1.5)
        assert trajectory.predictions[15] == 77.5
        assert trajectory.predictions[30] == 55.0

    def test_trajectory_floors_at_zero(self):
        """Glucose predictions should never go below 0."""
        trajectory = calculate_trajectory(30.0, -3.0, horizons=[30])
        assert trajectory.predictions[30] == 0.0


# ── Decision table tests ──


class TestClassifyAlert:
    """Tests for the alert decision table."""

    @pytest.mark.parametrize(
        ("bgl", "trend", "severity", "condition"),
        [
            (65, "steady", AlertSeverity.CRITICAL, AlertCondition.HYPOGLYCEMIA),
            (120, "double_down", AlertSeverity.CRITICAL, AlertCondition.HYPOGLYCEMIA),
            (260, "up", AlertSeverity.CRITICAL, AlertCondition.HYPERGLYCEMIA),
            (120, "double_up", AlertSeverity.CRITICAL, AlertCondition.HYPERGLYCEMIA),
            (75, "steady", AlertSeverity.WARNING, AlertCondition.LOW_WARNING),
            (200, "down", AlertSeverity.WARNING, AlertCondition.HIGH_WARNING),
            (120, "steady", AlertSeverity.NONE, None),
        ],
    )
    def test_decision_table(self, bgl, trend, severity, condition):
        assert classify_alert(bgl, TrendDirection(trend)) == (severity, condition)

    @pytest.mark.parametrize(
        ("bgl", "severity"),
        [
            (69, AlertSeverity.CRITICAL),
            (70, AlertSeverity.WARNING),
            (79, AlertSeverity.WARNING),
            (80, AlertSeverity.NONE),
            (180, AlertSeverity.NONE),
            (181, AlertSeverity.WARNING),
            (250, AlertSeverity.WARNING),
            (251, AlertSeverity.CRITICAL),
        ],
    )
    def test_threshold_boundaries(self, bgl, severity):
        severity_result, _ = classify_alert(bgl, TrendDirection.STEADY)
        assert severity_result is severity

    def test_first_match_wins(self):
        """A very high reading falling fast is classified as hypoglycemia."""
        assert classify_alert(300, TrendDirection.DOUBLE_DOWN) == (
            AlertSeverity.CRITICAL,
            AlertCondition.HYPOGLYCEMIA,
        )


# ── Evaluate tests ──


class TestEvaluate:
    """Tests for full alert evaluation."""

    def test_critical_hypoglycemia(self):
        verdict = evaluate(65, "steady", 0)
        assert verdict.alert is True
        assert verdict.severity is AlertSeverity.CRITICAL
        assert verdict.condition is AlertCondition.HYPOGLYCEMIA
        assert verdict.rationale.startswith("Hypoglycemia: 65 mg/dL")

    def test_in_range_with_insulin(self):
        """IoB never escalates an in-range reading."""
        verdict = evaluate(120, "steady", 2)
        assert verdict.alert is False
        assert verdict.severity is AlertSeverity.NONE
        assert verdict.condition is None
        assert "2.0 U insulin on board" in verdict.rationale

    def test_critical_hyperglycemia(self):
        verdict = evaluate(260, TrendDirection.UP, 0)
        assert verdict.alert is True
        assert verdict.severity is AlertSeverity.CRITICAL
        assert verdict.condition is AlertCondition.HYPERGLYCEMIA
        assert "Projected" in verdict.rationale

    def test_low_warning(self):
        verdict = evaluate(75, "steady", 0)
        assert verdict.alert is True
        assert verdict.severity is AlertSeverity.WARNING

    def test_steady_rationale_has_no_projection(self):
        verdict = evaluate(75, "steady", 0)
        assert "Projected" not in verdict.rationale

    def test_iob_commentary_for_low(self):
        """Low conditions mention that insulin keeps acting."""
        verdict = evaluate(72, "down", 1.5)
        assert "1.5 U insulin on board will keep pulling glucose down." in (
            verdict.rationale
        )

    def test_profile_adds_context(self):
        profile = PatientProfile(target_bgl=110, insulin_sensitivity_factor=40)
        verdict = evaluate(200, "up", 2.0, profile)
        assert "up to ~80 mg/dL further drop expected" in verdict.rationale
        assert "Target is 110 mg/dL." in verdict.rationale

    def test_profile_never_changes_severity(self):
        profile = PatientProfile(target_bgl=200)
        assert evaluate(120, "steady", 0, profile).severity is AlertSeverity.NONE

    @pytest.mark.parametrize(
        ("bgl", "iob"),
        [(math.nan, 0), (120, math.nan), (-1, 0), (120, -0.5), (math.inf, 0)],
    )
    def test_out_of_domain_inputs_rejected(self, bgl, iob):
        with pytest.raises(OutOfDomainError):
            evaluate(bgl, "steady", iob)

    def test_unknown_trend_rejected(self):
        with pytest.raises(OutOfDomainError):
            evaluate(120, "sideways", 0)
