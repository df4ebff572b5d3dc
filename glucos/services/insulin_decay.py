"""Insulin on Board (IoB) estimator.

Computes active insulin from bolus dose history with a linear decay over a
five hour action window. Basal doses are recorded but never contribute.

This is intentionally a simplified linear model rather than a
bi-exponential pharmacokinetic curve: every reading stores the IoB value
produced here, so changing the curve changes recorded history.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from glucos.core.constants import INSULIN_ACTIVE_WINDOW
from glucos.models.events import DoseKind, MedicationDose

# Projection horizons reported alongside the current IoB
PROJECTION_MINUTES = (30, 60)


@dataclass
class IoBSnapshot:
    """Current and projected IoB values at a point in time."""

    computed_at: datetime
    iob: float
    projected_30min: float
    projected_60min: float
    active_dose_count: int


def insulin_remaining_fraction(
    age: timedelta,
    active_window: timedelta = INSULIN_ACTIVE_WINDOW,
) -> float:
    """Fraction of a bolus still active after ``age``.

    Linear decay: 1.0 at delivery, 0.0 at (and after) the window boundary.
    The formula is applied as is to a dose timestamped after the evaluation
    time, so such a dose counts for more than its units.

    Args:
        age: Time elapsed since the dose was delivered.
        active_window: Duration of insulin action.

    Returns:
        Fraction of insulin remaining; above 1.0 only for a future dose
    """
    if age >= active_window:
        return 0.0
    return max(0.0, (active_window - age) / active_window)


def compute_iob(
    now: datetime,
    doses: Iterable[MedicationDose],
    active_window: timedelta = INSULIN_ACTIVE_WINDOW,
) -> float:
    """Compute total insulin on board at ``now``.

    Args:
        now: Evaluation time (timezone-aware).
        doses: Dose history, any order, any kinds.
        active_window: Duration of insulin action.

    Returns:
        Remaining insulin in units, never negative.
    """
    total = 0.0
    for dose in doses:
        if dose.dose_kind is not DoseKind.BOLUS:
            continue
        age = now - dose.timestamp
        if age >= active_window:
            continue
        total += dose.units * insulin_remaining_fraction(age, active_window)
    return max(0.0, total)


def project_iob(
    now: datetime,
    doses: Iterable[MedicationDose],
    minutes: int,
    active_window: timedelta = INSULIN_ACTIVE_WINDOW,
) -> float:
    """Project IoB ``minutes`` ahead, assuming no further doses."""
    return compute_iob(now + timedelta(minutes=minutes), doses, active_window)


def get_iob_snapshot(now: datetime, doses: Iterable[MedicationDose]) -> IoBSnapshot:
    """Compute current IoB plus the 30/60 minute projections.

    Args:
        now: Evaluation time.
        doses: Dose history.

    Returns:
        IoBSnapshot with values rounded to two decimals.
    """
    doses = list(doses)
    active = [
        dose
        for dose in doses
        if dose.dose_kind is DoseKind.BOLUS
        and now - dose.timestamp < INSULIN_ACTIVE_WINDOW
    ]
    projected_30, projected_60 = (
        project_iob(now, active, minutes) for minutes in PROJECTION_MINUTES
    )
    return IoBSnapshot(
        computed_at=now,
        iob=round(compute_iob(now, active), 2),
        projected_30min=round(projected_30, 2),
        projected_60min=round(projected_60, 2),
        active_dose_count=len(active),
    )
