"""Background job scheduler.

APScheduler-based housekeeping for a patient monitor: periodic snapshot
autosave and age-based pruning of old events. Each scheduler belongs to
the app that started it (kept on ``app.state``). The reading generator
owns its own ticker and is not scheduled here.
"""

from datetime import timedelta

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from glucos.config import settings
from glucos.database import get_session_maker
from glucos.logging_config import get_logger
from glucos.services.monitor import PatientMonitor
from glucos.services.persistence import PersistenceError, save_store

logger = get_logger(__name__)


async def autosave_event_store(monitor: PatientMonitor) -> None:
    """Persist the monitor's event store snapshot.

    Failures are logged and retried on the next interval.
    """
    try:
        async with get_session_maker()() as db:
            saved = await save_store(db, monitor.store)
        logger.debug("Scheduled autosave completed", **saved)
    except PersistenceError as e:
        logger.warning("Scheduled autosave failed", error=str(e))
    except Exception as e:
        logger.error("Unexpected error in scheduled autosave", error=str(e))


async def prune_old_events(monitor: PatientMonitor) -> None:
    """Delete events older than the configured retention period."""
    logger.info(
        "Starting scheduled data retention enforcement",
        retention_days=settings.data_retention_days,
    )
    try:
        removed = monitor.store.prune_older_than(
            timedelta(days=settings.data_retention_days)
        )
    except Exception as e:
        logger.error("Data retention enforcement failed", error=str(e))
        return

    logger.info(
        "Scheduled data retention enforcement completed",
        total_records_deleted=sum(removed.values()),
        **removed,
    )


def start_scheduler(monitor: PatientMonitor) -> AsyncIOScheduler:
    """Start the background job scheduler.

    Args:
        monitor: Patient monitor whose store the jobs maintain

    Returns:
        The started scheduler; the caller owns it and passes it to
        stop_scheduler on shutdown
    """
    scheduler = AsyncIOScheduler()

    # Add snapshot autosave job if persistence is enabled
    if settings.persistence_enabled:
        scheduler.add_job(
            autosave_event_store,
            trigger=IntervalTrigger(seconds=settings.autosave_interval_seconds),
            args=[monitor],
            id="event_store_autosave",
            name="Event Store Autosave",
            replace_existing=True,
            max_instances=1,
        )
        logger.info(
            "Scheduled event store autosave job",
            interval_seconds=settings.autosave_interval_seconds,
        )

    # Add data retention enforcement job if enabled
    if settings.data_retention_enabled:
        scheduler.add_job(
            prune_old_events,
            trigger=IntervalTrigger(hours=settings.data_retention_check_interval_hours),
            args=[monitor],
            id="data_retention",
            name="Data Retention Enforcement",
            replace_existing=True,
            max_instances=1,
        )
        logger.info(
            "Scheduled data retention enforcement job",
            interval_hours=settings.data_retention_check_interval_hours,
        )

    scheduler.start()
    logger.info("Background scheduler started")

    return scheduler


def stop_scheduler(scheduler: AsyncIOScheduler | None) -> None:
    """Stop a scheduler returned by start_scheduler. None is a no-op."""
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Background scheduler stopped")
