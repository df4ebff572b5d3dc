"""Glucose reading router.

Current status, history and manual entry of glucose readings.
"""

from datetime import timedelta

from fastapi import APIRouter, HTTPException, Query, status

from glucos.dependencies import Monitor
from glucos.logging_config import get_logger
from glucos.models.events import EventKind
from glucos.schemas.common import ErrorResponse
from glucos.schemas.glucose import (
    CurrentGlucoseResponse,
    GlucoseHistoryResponse,
    GlucoseReadingResponse,
    ManualReadingRequest,
    ManualReadingResponse,
)
from glucos.services.trend import trend_description

logger = get_logger(__name__)

router = APIRouter(prefix="/api/glucose", tags=["Glucose"])


@router.get(
    "/current",
    response_model=CurrentGlucoseResponse,
    responses={200: {"description": "Current simulated glucose status"}},
)
async def get_current_glucose(monitor: Monitor) -> CurrentGlucoseResponse:
    """Get the current simulated glucose value with live insulin on board."""
    current = monitor.current_reading()
    return CurrentGlucoseResponse(
        value=current.value,
        trend=current.trend,
        trend_description=trend_description(current.trend),
        insulin_on_board=current.insulin_on_board,
        timestamp=current.timestamp,
        generator_running=monitor.is_running,
    )


@router.get(
    "/latest",
    response_model=GlucoseReadingResponse,
    responses={
        200: {"description": "Most recent stored reading"},
        404: {"model": ErrorResponse, "description": "No readings available"},
    },
)
async def get_latest_glucose(monitor: Monitor) -> GlucoseReadingResponse:
    """Get the most recent glucose reading from the event store."""
    latest = monitor.latest(EventKind.GLUCOSE)
    if latest is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No glucose readings available. Start the monitor or add a reading.",
        )
    return GlucoseReadingResponse.model_validate(latest)


@router.get(
    "/history",
    response_model=GlucoseHistoryResponse,
    responses={200: {"description": "Glucose reading history"}},
)
async def get_glucose_history(
    monitor: Monitor,
    hours: int = Query(default=24, ge=1, le=720, description="Hours of history"),
) -> GlucoseHistoryResponse:
    """Get glucose readings for the last ``hours``, oldest first."""
    readings = monitor.query(EventKind.GLUCOSE, since=timedelta(hours=hours))
    return GlucoseHistoryResponse(
        readings=[GlucoseReadingResponse.model_validate(r) for r in readings],
        count=len(readings),
        hours=hours,
    )


@router.post(
    "/manual",
    response_model=ManualReadingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Reading recorded and evaluated"},
        422: {"description": "Reading out of range"},
    },
)
async def add_manual_reading(
    request: ManualReadingRequest,
    monitor: Monitor,
) -> ManualReadingResponse:
    """Record a manually measured glucose reading.

    The reading is evaluated by the alert engine immediately; an alert is
    dispatched to the notification sink when warranted.
    """
    result = monitor.add_manual_reading(
        value=request.value,
        trend=request.trend,
        insulin_on_board=request.insulin_on_board,
        note=request.note,
    )
    return ManualReadingResponse.model_validate(result)
