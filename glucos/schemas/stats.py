"""Statistics and patient context schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from glucos.schemas.events import MealResponse
from glucos.schemas.glucose import GlucoseReadingResponse


class GlucoseStatisticsResponse(BaseModel):
    """Response schema for sliding-window glucose statistics."""

    model_config = {"from_attributes": True}

    avg_bgl: int = Field(..., ge=0, description="Mean glucose in mg/dL")
    time_in_range_pct: int = Field(
        ..., ge=0, le=100, description="Readings within 70-180 mg/dL (%)"
    )
    time_above_pct: int = Field(
        ..., ge=0, le=100, description="Readings above 180 mg/dL (%)"
    )
    time_below_pct: int = Field(
        ..., ge=0, le=100, description="Readings below 70 mg/dL (%)"
    )
    hypo_event_count: int = Field(..., ge=0, description="Readings below 70 mg/dL")
    hyper_event_count: int = Field(..., ge=0, description="Readings above 250 mg/dL")
    reading_count: int = Field(..., ge=0, description="Readings in the window")
    avg_carbs_per_meal: int = Field(..., ge=0, description="Mean carbs per meal (g)")
    total_insulin_units: float = Field(
        ..., ge=0, description="Insulin logged in the window (units)"
    )


class StatisticsResponse(BaseModel):
    """Response schema wrapping statistics with their window."""

    hours: int = Field(..., description="Lookback window in hours")
    statistics: GlucoseStatisticsResponse


class PatientProfileResponse(BaseModel):
    """Response schema for the patient profile."""

    model_config = {"from_attributes": True}

    name: str
    target_bgl: float
    insulin_to_carb_ratio: str
    insulin_sensitivity_factor: float
    basal_rate: float


class PatientContextResponse(BaseModel):
    """Response schema for the assistant context bundle."""

    model_config = {"from_attributes": True}

    generated_at: datetime
    recent_readings: list[GlucoseReadingResponse] = Field(
        ..., description="Readings from the last 4 hours"
    )
    recent_meals: list[MealResponse] = Field(
        ..., description="Meals from the last 8 hours"
    )
    current_iob: float = Field(..., description="Current insulin on board (units)")
    profile: PatientProfileResponse
    statistics: GlucoseStatisticsResponse = Field(
        ..., description="Statistics over the last 7 days"
    )
