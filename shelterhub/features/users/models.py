"""
User model with ULID primary keys.
"""
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from shelterhub.core.database.base import Base, TimestampMixin, generate_ulid


class User(Base, TimestampMixin):
    """
    User model representing authenticated users.

    The id is the subject of the bearer token issued by the auth service, so
    profiles are registered under the identity that created them.
    Shelter roles are not stored here: administered and joined shelters are
    read from the shelter_memberships table.
    """
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    # Public handle, letters, digits, dots and underscores
    username: Mapped[str] = mapped_column(String(15), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(15), nullable=False, default="")

    # Optional fields
    profile_image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    bio: Mapped[str | None] = mapped_column(String(250), nullable=True)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username={self.username!r})>"
