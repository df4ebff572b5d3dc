"""Glucose reading schemas.

Pydantic schemas for glucose reading API requests and responses.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from glucos.core.constants import MAX_READING_MGDL, MIN_READING_MGDL
from glucos.models.alert import AlertCondition, AlertSeverity
from glucos.models.events import TrendDirection


class GlucoseReadingResponse(BaseModel):
    """Response schema for a single glucose reading."""

    model_config = {"from_attributes": True}

    timestamp: datetime = Field(..., description="When the reading was taken")
    value: int = Field(..., description="Glucose value in mg/dL")
    trend: TrendDirection = Field(..., description="Trend direction")
    insulin_on_board: float = Field(
        ..., description="Insulin on board (units) when the reading was taken"
    )
    note: str | None = Field(None, description="Free-text note")


class CurrentGlucoseResponse(BaseModel):
    """Response schema for the current simulated glucose status."""

    value: int = Field(..., description="Current glucose value in mg/dL")
    trend: TrendDirection = Field(..., description="Current trend direction")
    trend_description: str = Field(..., description="Trend arrow and label")
    insulin_on_board: float = Field(..., description="Live insulin on board (units)")
    timestamp: datetime = Field(..., description="When the status was computed")
    generator_running: bool = Field(
        ..., description="True if the reading generator is running"
    )


class GlucoseHistoryResponse(BaseModel):
    """Response schema for glucose history."""

    readings: list[GlucoseReadingResponse]
    count: int = Field(..., description="Number of readings returned")
    hours: int = Field(..., description="Lookback window in hours")


class ManualReadingRequest(BaseModel):
    """Request schema for a manually entered glucose reading."""

    value: int = Field(
        ...,
        ge=MIN_READING_MGDL,
        le=MAX_READING_MGDL,
        description="Glucose value in mg/dL. Range: 40-400.",
    )
    trend: TrendDirection = Field(
        default=TrendDirection.STEADY,
        description="Trend direction chosen by the patient",
    )
    insulin_on_board: float | None = Field(
        default=None,
        ge=0,
        allow_inf_nan=False,
        description="Insulin on board in units. Defaults to the live estimate.",
    )
    note: str | None = Field(default=None, max_length=500)


class AlertVerdictResponse(BaseModel):
    """Response schema for an alert engine verdict."""

    model_config = {"from_attributes": True}

    alert: bool = Field(..., description="True if the reading warrants an alert")
    severity: AlertSeverity = Field(..., description="Alert severity tier")
    condition: AlertCondition | None = Field(
        None, description="Condition that triggered the alert"
    )
    rationale: str = Field(..., description="Human-readable explanation")


class ManualReadingResponse(BaseModel):
    """Response schema for a recorded manual reading."""

    model_config = {"from_attributes": True}

    reading: GlucoseReadingResponse
    verdict: AlertVerdictResponse
