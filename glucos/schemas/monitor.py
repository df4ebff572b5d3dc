"""Monitor control schemas."""

from pydantic import BaseModel, Field

from glucos.models.events import TrendDirection
from glucos.schemas.stats import GlucoseStatisticsResponse


class MonitorStatusResponse(BaseModel):
    """Response schema for the monitor status."""

    running: bool = Field(..., description="True if the reading generator is running")
    interval_minutes: int = Field(..., description="Generation interval in minutes")
    current_value: int = Field(..., description="Current simulated glucose (mg/dL)")
    current_trend: TrendDirection
    reading_count: int = Field(..., description="Readings held in the event store")
    meal_count: int = Field(..., description="Meals held in the event store")
    medication_count: int = Field(..., description="Doses held in the event store")
    scheduled_jobs: int = Field(..., description="Generator jobs currently scheduled")


class MonitorActionResponse(BaseModel):
    """Response schema for start/stop requests."""

    message: str
    running: bool
    changed: bool = Field(
        ..., description="False if the generator was already in the requested state"
    )


class SampleDataResponse(BaseModel):
    """Response schema for sample data population."""

    model_config = {"from_attributes": True}

    readings: int = Field(..., description="Glucose readings added")
    meals: int = Field(..., description="Meals added")
    doses: int = Field(..., description="Insulin doses added")
    statistics: GlucoseStatisticsResponse
