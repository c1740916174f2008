"""
Animal SQLAlchemy model.
"""
from datetime import datetime
import enum

from sqlalchemy import String, ForeignKey, Boolean, Integer, Text, DateTime, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column

from shelterhub.core.database.base import Base, TimestampMixin, generate_ulid


class Species(str, enum.Enum):
    DOG = "dog"
    CAT = "cat"
    RABBIT = "rabbit"
    BIRD = "bird"
    RODENT = "rodent"
    REPTILE = "reptile"
    OTHER = "other"


class Gender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"


class Size(str, enum.Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    GIANT = "giant"


class AdoptionStatus(str, enum.Enum):
    AVAILABLE = "available"
    ADOPTION_PENDING = "adoption_pending"
    ADOPTED = "adopted"
    FOSTERED = "fostered"


class Animal(Base, TimestampMixin):
    """
    Animal record owned by a shelter.

    Attributes:
        shelter_id: Owning shelter, set on creation and never changed
        created_by_id: Admin who registered the animal
    """
    __tablename__ = "animals"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    # Basic data
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    species: Mapped[Species] = mapped_column(SQLEnum(Species), nullable=False, default=Species.DOG)
    breed: Mapped[str] = mapped_column(String(100), nullable=False, default="Mixed/Unknown")
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Physical traits
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    gender: Mapped[Gender] = mapped_column(SQLEnum(Gender), nullable=False)
    size: Mapped[Size] = mapped_column(SQLEnum(Size), nullable=False, default=Size.MEDIUM)
    color: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Care and status
    status: Mapped[AdoptionStatus] = mapped_column(
        SQLEnum(AdoptionStatus), nullable=False, default=AdoptionStatus.AVAILABLE
    )
    sterilized: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    vaccinated: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    microchipped: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    arrival_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.now)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Ownership
    shelter_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("shelters.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_by_id: Mapped[str | None] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        Index("ix_animals_shelter_status", "shelter_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<Animal(id={self.id}, name={self.name!r}, shelter_id={self.shelter_id})>"
