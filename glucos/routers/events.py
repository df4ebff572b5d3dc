"""Meal, medication and insulin on board router."""

from datetime import timedelta

from fastapi import APIRouter, Query, status

from glucos.dependencies import Monitor
from glucos.models.events import EventKind
from glucos.schemas.events import (
    IoBResponse,
    MealCreate,
    MealListResponse,
    MealResponse,
    MedicationCreate,
    MedicationListResponse,
    MedicationResponse,
)

router = APIRouter(prefix="/api", tags=["Events"])


@router.post(
    "/meals",
    response_model=MealResponse,
    status_code=status.HTTP_201_CREATED,
)
async def log_meal(request: MealCreate, monitor: Monitor) -> MealResponse:
    """Log a meal at the current time."""
    meal = monitor.log_meal(
        description=request.description,
        carbs=request.carbs,
        protein=request.protein,
        fat=request.fat,
        insulin_dose=request.insulin_dose,
    )
    return MealResponse.model_validate(meal)


@router.get("/meals", response_model=MealListResponse)
async def list_meals(
    monitor: Monitor,
    hours: int = Query(default=24, ge=1, le=720, description="Hours of history"),
) -> MealListResponse:
    meals = monitor.query(EventKind.MEAL, since=timedelta(hours=hours))
    return MealListResponse(
        meals=[MealResponse.model_validate(m) for m in meals],
        count=len(meals),
    )


@router.post(
    "/medications",
    response_model=MedicationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def log_medication(
    request: MedicationCreate, monitor: Monitor
) -> MedicationResponse:
    """Log an insulin dose at the current time.

    Bolus doses count toward insulin on board for five hours.
    """
    dose = monitor.log_medication(
        dose_kind=request.dose_kind,
        units=request.units,
        note=request.note,
    )
    return MedicationResponse.model_validate(dose)


@router.get("/medications", response_model=MedicationListResponse)
async def list_medications(
    monitor: Monitor,
    hours: int = Query(default=24, ge=1, le=720, description="Hours of history"),
) -> MedicationListResponse:
    doses = monitor.query(EventKind.MEDICATION, since=timedelta(hours=hours))
    return MedicationListResponse(
        doses=[MedicationResponse.model_validate(d) for d in doses],
        count=len(doses),
    )


@router.get("/insulin/iob", response_model=IoBResponse)
async def get_insulin_on_board(monitor: Monitor) -> IoBResponse:
    """Get current insulin on board with 30 and 60 minute projections."""
    return IoBResponse.model_validate(monitor.iob_snapshot())
