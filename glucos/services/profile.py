"""Patient profile provider.

The profile is context only: target BGL, insulin-to-carb ratio and
insulin sensitivity factor are passed through to the reading generator and
the alert rationale without validation or transformation.
"""

from dataclasses import dataclass

from glucos.config import Settings, settings


@dataclass(frozen=True)
class PatientProfile:
    """Therapy settings of the monitored patient."""

    name: str = "Patient"
    target_bgl: float = 120.0
    insulin_to_carb_ratio: str = "1:10"
    insulin_sensitivity_factor: float = 50.0
    basal_rate: float = 1.0


def get_patient_profile(config: Settings = settings) -> PatientProfile:
    """Build the patient profile from application settings."""
    return PatientProfile(
        name=config.patient_name,
        target_bgl=config.target_bgl,
        insulin_to_carb_ratio=config.insulin_to_carb_ratio,
        insulin_sensitivity_factor=config.insulin_sensitivity_factor,
        basal_rate=config.basal_rate,
    )
