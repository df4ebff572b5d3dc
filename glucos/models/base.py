"""SQLAlchemy declarative base for the persistence boundary."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all persisted models."""
