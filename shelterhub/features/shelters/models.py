"""
Shelter models.

Shelters group admins, members (volunteers), animals and tasks.
A user's relationship to a shelter is a single row in shelter_memberships,
so a user is never both admin and member of the same shelter and the
user-side and shelter-side views can't drift apart.
"""
from datetime import datetime
import enum

from sqlalchemy import String, ForeignKey, Table, Column, DateTime, Enum as SQLEnum, Text
from sqlalchemy.orm import Mapped, mapped_column

from shelterhub.core.database.base import Base, TimestampMixin, generate_ulid


class MembershipRole(str, enum.Enum):
    """Role of a user within a shelter. No row means no role."""
    ADMIN = "admin"
    MEMBER = "member"


class PromotedFrom(str, enum.Enum):
    """Role held before promotion to admin. NULL on rows that started as admin."""
    MEMBER = "member"
    NONE = "none"


shelter_memberships = Table(
    "shelter_memberships",
    Base.metadata,
    Column("user_id", String(26), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("shelter_id", String(26), ForeignKey("shelters.id", ondelete="CASCADE"), primary_key=True),
    Column("role", SQLEnum(MembershipRole), nullable=False, default=MembershipRole.MEMBER, index=True),
    Column("promoted_from", SQLEnum(PromotedFrom), nullable=True),
    Column("joined_at", DateTime(timezone=True), nullable=False, default=datetime.now),
)


class Shelter(Base, TimestampMixin):
    """
    Shelter model.

    The handle is unique and human readable. Admins, members, animals and
    tasks are not columns here; see features.shelters.store for the
    membership projections and the animals/tasks tables for ownership.
    """
    __tablename__ = "shelters"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    handle: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)

    bio: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image_url: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    location: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    # Contact details
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    website: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Social media profile links
    facebook: Mapped[str | None] = mapped_column(String(255), nullable=True)
    instagram: Mapped[str | None] = mapped_column(String(255), nullable=True)
    twitter: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Shelter(id={self.id}, handle={self.handle!r})>"
