"""
SQLAlchemy declarative base and common model utilities.

All SQLAlchemy models should inherit from Base.
"""
from datetime import datetime
from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from ulid import ULID


def generate_ulid() -> str:
    """Generate a new ULID string."""
    return str(ULID())


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Usage:
        from shelterhub.core.database.base import Base

        class Animal(Base):
            __tablename__ = "animals"

            id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
            name: Mapped[str] = mapped_column(String(100))
    """
    pass


class TimestampMixin:
    """
    Mixin to add created_at and updated_at timestamps to models.

    Usage:
        class Shelter(Base, TimestampMixin):
            __tablename__ = "shelters"
            id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    """
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
