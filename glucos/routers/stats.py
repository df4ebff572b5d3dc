"""Statistics and patient context router."""

from datetime import timedelta

from fastapi import APIRouter, Query

from glucos.dependencies import Monitor
from glucos.schemas.stats import (
    GlucoseStatisticsResponse,
    PatientContextResponse,
    StatisticsResponse,
)
from glucos.services.context import build_patient_context

router = APIRouter(prefix="/api", tags=["Statistics"])


@router.get("/stats", response_model=StatisticsResponse)
async def get_statistics(
    monitor: Monitor,
    hours: int = Query(
        default=168, ge=1, le=720, description="Analysis window in hours (max 30d)"
    ),
) -> StatisticsResponse:
    """Get glucose statistics over the lookback window.

    Time in range is 70-180 mg/dL inclusive. Hyper events count readings
    above 250 mg/dL.
    """
    statistics = monitor.summarize(timedelta(hours=hours))
    return StatisticsResponse(
        hours=hours,
        statistics=GlucoseStatisticsResponse.model_validate(statistics),
    )


@router.get("/context", response_model=PatientContextResponse)
async def get_patient_context(monitor: Monitor) -> PatientContextResponse:
    """Get the context bundle consumed by the assistants."""
    return PatientContextResponse.model_validate(build_patient_context(monitor))
