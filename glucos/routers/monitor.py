"""Monitor control router.

Start and stop the reading generator, inspect its status and backfill
sample data.
"""

from fastapi import APIRouter, status

from glucos.dependencies import Monitor
from glucos.logging_config import get_logger
from glucos.models.events import EventKind
from glucos.schemas.monitor import (
    MonitorActionResponse,
    MonitorStatusResponse,
    SampleDataResponse,
)
from glucos.services.sample_data import populate_sample_data

logger = get_logger(__name__)

router = APIRouter(prefix="/api/monitor", tags=["Monitor"])


@router.post("/start", response_model=MonitorActionResponse)
async def start_monitor(monitor: Monitor) -> MonitorActionResponse:
    """Start the reading generator. Starting a running monitor is a no-op."""
    changed = monitor.start()
    return MonitorActionResponse(
        message="Monitor started" if changed else "Monitor already running",
        running=monitor.is_running,
        changed=changed,
    )


@router.post("/stop", response_model=MonitorActionResponse)
async def stop_monitor(monitor: Monitor) -> MonitorActionResponse:
    """Stop the reading generator. Stopping a stopped monitor is a no-op."""
    changed = monitor.stop()
    return MonitorActionResponse(
        message="Monitor stopped" if changed else "Monitor not running",
        running=monitor.is_running,
        changed=changed,
    )


@router.get("/status", response_model=MonitorStatusResponse)
async def get_monitor_status(monitor: Monitor) -> MonitorStatusResponse:
    current = monitor.current_reading()
    return MonitorStatusResponse(
        running=monitor.is_running,
        interval_minutes=monitor.generator.interval_minutes,
        current_value=current.value,
        current_trend=current.trend,
        reading_count=monitor.store.count(EventKind.GLUCOSE),
        meal_count=monitor.store.count(EventKind.MEAL),
        medication_count=monitor.store.count(EventKind.MEDICATION),
        scheduled_jobs=monitor.generator.scheduled_jobs(),
    )


@router.post(
    "/sample-data",
    response_model=SampleDataResponse,
    status_code=status.HTTP_201_CREATED,
)
async def load_sample_data(monitor: Monitor) -> SampleDataResponse:
    """Backfill a week of sample readings, meals and doses."""
    result = populate_sample_data(monitor)
    return SampleDataResponse.model_validate(result)
