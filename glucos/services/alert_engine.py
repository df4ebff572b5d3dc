"""Threshold alert engine.

Decides whether a glucose reading warrants an alert. The decision table is
a pure function of (glucose, trend) and is kept separate from the
rationale text, which adds a short trajectory projection and insulin on
board commentary but never changes the severity tier.
"""

from dataclasses import dataclass

from glucos.core.constants import (
    HIGH_WARNING_ABOVE,
    HYPER_CRITICAL_ABOVE,
    HYPO_CRITICAL_BELOW,
    LOW_WARNING_BELOW,
)
from glucos.core.numeric import OutOfDomainError, require_non_negative
from glucos.models.alert import AlertCondition, AlertSeverity
from glucos.models.events import TrendDirection
from glucos.services.profile import PatientProfile
from glucos.services.trend import trend_description

# Prediction horizons in minutes used for the rationale
PREDICTION_HORIZONS = [15, 30]

# Nominal rate (mg/dL/min) assumed for each trend when projecting
TREND_NOMINAL_RATE: dict[TrendDirection, float] = {
    TrendDirection.DOUBLE_UP: 3.0,
    TrendDirection.UP: 1.5,
    TrendDirection.STEADY: 0.0,
    TrendDirection.DOWN: -1.5,
    TrendDirection.DOUBLE_DOWN: -3.0,
}

CONDITION_HEADLINE: dict[AlertCondition, str] = {
    AlertCondition.HYPOGLYCEMIA: "Hypoglycemia",
    AlertCondition.HYPERGLYCEMIA: "Hyperglycemia",
    AlertCondition.LOW_WARNING: "Approaching low glucose",
    AlertCondition.HIGH_WARNING: "High glucose",
}


@dataclass(frozen=True)
class GlucoseTrajectory:
    """Predicted glucose values at future time points."""

    current_value: float
    trend_rate: float  # mg/dL/min
    predictions: dict[int, float]  # minutes -> predicted mg/dL


@dataclass(frozen=True)
class AlertVerdict:
    """Outcome of one alert evaluation."""

    alert: bool
    severity: AlertSeverity
    condition: AlertCondition | None
    rationale: str


def calculate_trajectory(
    current_value: float,
    trend_rate: float,
    horizons: list[int] | None = None,
) -> GlucoseTrajectory:
    """Calculate a linear glucose trajectory at future time points.

    Args:
        current_value: Current glucose in mg/dL.
        trend_rate: Rate of change in mg/dL/min.
        horizons: Prediction horizons in minutes (default: 15, 30).

    Returns:
        GlucoseTrajectory with predictions at each horizon.
    """
    if horizons is None:
        horizons = PREDICTION_HORIZONS

    predictions = {}
    for minutes in horizons:
        predicted = current_value + (trend_rate * minutes)
        # Glucose can't go below 0
        predictions[minutes] = max(0.0, round(predicted, 1))

    return GlucoseTrajectory(
        current_value=current_value,
        trend_rate=trend_rate,
        predictions=predictions,
    )


def classify_alert(
    bgl: float, trend: TrendDirection
) -> tuple[AlertSeverity, AlertCondition | None]:
    """Apply the alert decision table. First match wins.

    - bgl < 70 or double_down: critical hypoglycemia
    - bgl > 250 or double_up: critical hyperglycemia
    - 70 <= bgl < 80: low warning
    - 180 < bgl <= 250: high warning
    - otherwise: no alert
    """
    if bgl < HYPO_CRITICAL_BELOW or trend is TrendDirection.DOUBLE_DOWN:
        return AlertSeverity.CRITICAL, AlertCondition.HYPOGLYCEMIA
    if bgl > HYPER_CRITICAL_ABOVE or trend is TrendDirection.DOUBLE_UP:
        return AlertSeverity.CRITICAL, AlertCondition.HYPERGLYCEMIA
    if HYPO_CRITICAL_BELOW <= bgl < LOW_WARNING_BELOW:
        return AlertSeverity.WARNING, AlertCondition.LOW_WARNING
    if HIGH_WARNING_ABOVE < bgl <= HYPER_CRITICAL_ABOVE:
        return AlertSeverity.WARNING, AlertCondition.HIGH_WARNING
    return AlertSeverity.NONE, None


def build_rationale(
    bgl: float,
    trend: TrendDirection,
    iob: float,
    condition: AlertCondition | None,
    profile: PatientProfile | None = None,
) -> str:
    """Describe the verdict with projection and IoB commentary."""
    headline = CONDITION_HEADLINE[condition] if condition else "In range"
    parts = [f"{headline}: {bgl:.0f} mg/dL, {trend_description(trend)}."]

    trajectory = calculate_trajectory(bgl, TREND_NOMINAL_RATE[trend])
    if trajectory.trend_rate != 0:
        projection = ", ".join(
            f"~{value:.0f} mg/dL in {minutes} min"
            for minutes, value in sorted(trajectory.predictions.items())
        )
        parts.append(f"Projected {projection} at the current trend.")

    if iob > 0:
        iob_text = f"{iob:.1f} U insulin on board"
        if profile is not None:
            expected_drop = iob * profile.insulin_sensitivity_factor
            iob_text += f" (up to ~{expected_drop:.0f} mg/dL further drop expected)"
        if condition in (AlertCondition.HYPOGLYCEMIA, AlertCondition.LOW_WARNING):
            parts.append(f"{iob_text} will keep pulling glucose down.")
        else:
            parts.append(f"{iob_text}.")

    if profile is not None and condition is not None:
        parts.append(f"Target is {profile.target_bgl:.0f} mg/dL.")

    return " ".join(parts)


def evaluate(
    bgl: float,
    trend: TrendDirection | str,
    iob: float,
    profile: PatientProfile | None = None,
) -> AlertVerdict:
    """Evaluate a reading against the alert thresholds.

    Args:
        bgl: Glucose value in mg/dL.
        trend: Trend direction (enum or its string value).
        iob: Insulin on board in units; advisory only.
        profile: Optional patient profile passed through to the rationale.

    Returns:
        AlertVerdict; ``alert`` is False when severity is NONE.

    Raises:
        OutOfDomainError: For NaN, infinite or negative glucose / IoB, or
            an unknown trend value.
    """
    bgl = require_non_negative("bgl", bgl)
    iob = require_non_negative("iob", iob)
    try:
        trend = TrendDirection(trend)
    except ValueError as e:
        raise OutOfDomainError(f"unknown trend {trend!r}") from e

    severity, condition = classify_alert(bgl, trend)
    return AlertVerdict(
        alert=severity is not AlertSeverity.NONE,
        severity=severity,
        condition=condition,
        rationale=build_rationale(bgl, trend, iob, condition, profile),
    )
