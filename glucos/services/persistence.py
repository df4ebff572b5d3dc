"""Event store persistence.

Saves the in-memory event store as a full snapshot and restores it on
startup. Timestamps are stored as UTC; the original order of events with
equal timestamps is kept through the autoincrement id.
"""

from datetime import UTC, datetime

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from glucos.core.numeric import OutOfDomainError
from glucos.logging_config import get_logger
from glucos.models.events import GlucoseReading, MealEvent, MedicationDose
from glucos.models.snapshot import (
    GlucoseReadingRecord,
    MealEventRecord,
    MedicationDoseRecord,
)
from glucos.services.event_store import EventStore, StoreSnapshot

logger = get_logger(__name__)


class PersistenceError(Exception):
    """Error saving or restoring the event store snapshot."""


def _to_utc(timestamp: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is written as UTC
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=UTC)
    return timestamp.astimezone(UTC)


async def save_store(db: AsyncSession, store: EventStore) -> dict[str, int]:
    """Replace the persisted snapshot with the current store contents.

    Args:
        db: Database session
        store: Event store to save

    Returns:
        Number of rows written per stream

    Raises:
        PersistenceError: If the snapshot cannot be written
    """
    snapshot = store.snapshot()

    try:
        await db.execute(delete(GlucoseReadingRecord))
        await db.execute(delete(MealEventRecord))
        await db.execute(delete(MedicationDoseRecord))

        db.add_all(
            GlucoseReadingRecord(
                timestamp=_to_utc(reading.timestamp),
                value=reading.value,
                trend=reading.trend,
                insulin_on_board=reading.insulin_on_board,
                note=reading.note,
            )
            for reading in snapshot.readings
        )
        db.add_all(
            MealEventRecord(
                timestamp=_to_utc(meal.timestamp),
                description=meal.description,
                carbs=meal.carbs,
                protein=meal.protein,
                fat=meal.fat,
                insulin_dose=meal.insulin_dose,
            )
            for meal in snapshot.meals
        )
        db.add_all(
            MedicationDoseRecord(
                timestamp=_to_utc(dose.timestamp),
                dose_kind=dose.dose_kind,
                units=dose.units,
                note=dose.note,
            )
            for dose in snapshot.doses
        )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        raise PersistenceError(f"Failed to save event store: {e}") from e

    saved = {
        "glucose": len(snapshot.readings),
        "meal": len(snapshot.meals),
        "medication": len(snapshot.doses),
    }
    logger.debug("Event store snapshot saved", **saved)
    return saved


async def restore_store(db: AsyncSession, store: EventStore) -> dict[str, int]:
    """Load the persisted snapshot into the store.

    Rows that no longer pass event validation are skipped with a warning.
    The store's retention bounds are reapplied by ``EventStore.restore``.

    Args:
        db: Database session
        store: Event store to replace

    Returns:
        Number of events restored per stream

    Raises:
        PersistenceError: If the snapshot cannot be read
    """
    try:
        reading_rows = (
            await db.execute(
                select(GlucoseReadingRecord).order_by(
                    GlucoseReadingRecord.timestamp, GlucoseReadingRecord.id
                )
            )
        ).scalars().all()
        meal_rows = (
            await db.execute(
                select(MealEventRecord).order_by(
                    MealEventRecord.timestamp, MealEventRecord.id
                )
            )
        ).scalars().all()
        dose_rows = (
            await db.execute(
                select(MedicationDoseRecord).order_by(
                    MedicationDoseRecord.timestamp, MedicationDoseRecord.id
                )
            )
        ).scalars().all()
    except SQLAlchemyError as e:
        raise PersistenceError(f"Failed to load event store: {e}") from e

    readings: list[GlucoseReading] = []
    meals: list[MealEvent] = []
    doses: list[MedicationDose] = []
    skipped = 0

    for row in reading_rows:
        try:
            readings.append(
                GlucoseReading(
                    timestamp=_to_utc(row.timestamp),
                    value=row.value,
                    trend=row.trend,
                    insulin_on_board=row.insulin_on_board,
                    note=row.note,
                )
            )
        except OutOfDomainError as e:
            logger.warning("Skipping invalid stored reading", id=row.id, error=str(e))
            skipped += 1

    for row in meal_rows:
        try:
            meals.append(
                MealEvent(
                    timestamp=_to_utc(row.timestamp),
                    description=row.description,
                    carbs=row.carbs,
                    protein=row.protein,
                    fat=row.fat,
                    insulin_dose=row.insulin_dose,
                )
            )
        except OutOfDomainError as e:
            logger.warning("Skipping invalid stored meal", id=row.id, error=str(e))
            skipped += 1

    for row in dose_rows:
        try:
            doses.append(
                MedicationDose(
                    timestamp=_to_utc(row.timestamp),
                    dose_kind=row.dose_kind,
                    units=row.units,
                    note=row.note,
                )
            )
        except OutOfDomainError as e:
            logger.warning("Skipping invalid stored dose", id=row.id, error=str(e))
            skipped += 1

    restored = store.restore(
        StoreSnapshot(readings=tuple(readings), meals=tuple(meals), doses=tuple(doses))
    )
    if skipped:
        logger.warning("Skipped invalid stored events", skipped=skipped)
    return restored
