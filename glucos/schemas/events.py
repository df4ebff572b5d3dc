"""Meal, medication and insulin on board schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from glucos.models.events import DoseKind


class MealCreate(BaseModel):
    """Request schema for logging a meal."""

    description: str = Field(..., min_length=1, max_length=500)
    carbs: float | None = Field(
        default=None, ge=0, allow_inf_nan=False, description="Carbohydrates (g)"
    )
    protein: float | None = Field(
        default=None, ge=0, allow_inf_nan=False, description="Protein (g)"
    )
    fat: float | None = Field(
        default=None, ge=0, allow_inf_nan=False, description="Fat (g)"
    )
    insulin_dose: float | None = Field(
        default=None,
        ge=0,
        allow_inf_nan=False,
        description="Insulin taken with the meal (units)",
    )


class MealResponse(BaseModel):
    """Response schema for a logged meal."""

    model_config = {"from_attributes": True}

    timestamp: datetime
    description: str
    carbs: float | None = None
    protein: float | None = None
    fat: float | None = None
    insulin_dose: float | None = None


class MealListResponse(BaseModel):
    """Response schema for meal history."""

    meals: list[MealResponse]
    count: int = Field(..., description="Number of meals returned")


class MedicationCreate(BaseModel):
    """Request schema for logging an insulin dose."""

    dose_kind: DoseKind = Field(..., description="'basal' or 'bolus'")
    units: float = Field(
        ..., gt=0, le=100, allow_inf_nan=False, description="Dose in units"
    )
    note: str | None = Field(default=None, max_length=500)


class MedicationResponse(BaseModel):
    """Response schema for a logged insulin dose."""

    model_config = {"from_attributes": True}

    timestamp: datetime
    dose_kind: DoseKind
    units: float
    note: str | None = None


class MedicationListResponse(BaseModel):
    """Response schema for medication history."""

    doses: list[MedicationResponse]
    count: int = Field(..., description="Number of doses returned")


class IoBResponse(BaseModel):
    """Response schema for insulin on board."""

    model_config = {"from_attributes": True}

    computed_at: datetime = Field(..., description="Evaluation time")
    iob: float = Field(..., description="Current insulin on board (units)")
    projected_30min: float = Field(..., description="Projected IoB in 30 minutes")
    projected_60min: float = Field(..., description="Projected IoB in 60 minutes")
    active_dose_count: int = Field(
        ..., description="Boluses still inside the action window"
    )
