"""Persisted event store snapshot.

One table per event stream. Rows are written as a full replacement of the
in-memory store and read back in (timestamp, id) order on restore.
"""

from datetime import datetime

from sqlalchemy import DateTime, Enum, Float, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from glucos.models.base import Base
from glucos.models.events import DoseKind, TrendDirection


class GlucoseReadingRecord(Base):
    """Stored glucose reading."""

    __tablename__ = "glucose_readings"

    __table_args__ = (Index("ix_glucose_readings_timestamp", "timestamp"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    # Glucose value in mg/dL
    value: Mapped[int] = mapped_column(Integer, nullable=False)

    trend: Mapped[TrendDirection] = mapped_column(
        Enum(
            TrendDirection,
            name="trenddirection",
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
    )

    # IoB snapshot taken when the reading was written
    insulin_on_board: Mapped[float] = mapped_column(Float, nullable=False)

    note: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<GlucoseReadingRecord(value={self.value}, "
            f"trend={self.trend.value}, timestamp={self.timestamp})>"
        )


class MealEventRecord(Base):
    """Stored meal log."""

    __tablename__ = "meal_events"

    __table_args__ = (Index("ix_meal_events_timestamp", "timestamp"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    description: Mapped[str] = mapped_column(String(500), nullable=False)

    # Macros in grams
    carbs: Mapped[float | None] = mapped_column(Float, nullable=True)
    protein: Mapped[float | None] = mapped_column(Float, nullable=True)
    fat: Mapped[float | None] = mapped_column(Float, nullable=True)

    # Linked insulin dose in units
    insulin_dose: Mapped[float | None] = mapped_column(Float, nullable=True)


class MedicationDoseRecord(Base):
    """Stored insulin dose."""

    __tablename__ = "medication_doses"

    __table_args__ = (Index("ix_medication_doses_timestamp", "timestamp"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    dose_kind: Mapped[DoseKind] = mapped_column(
        Enum(
            DoseKind,
            name="dosekind",
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
    )

    units: Mapped[float] = mapped_column(Float, nullable=False)

    note: Mapped[str | None] = mapped_column(Text, nullable=True)
