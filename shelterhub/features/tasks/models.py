"""
Task and TaskComment SQLAlchemy models.
"""
from datetime import datetime
import enum

from sqlalchemy import String, ForeignKey, Boolean, Text, DateTime, Enum as SQLEnum, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shelterhub.core.database.base import Base, TimestampMixin, generate_ulid


class TaskTag(str, enum.Enum):
    HEALTH = "health"
    FOOD = "food"
    CLEANING = "cleaning"
    EXERCISE = "exercise"
    OTHER = "other"


class TaskPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Task(Base, TimestampMixin):
    """
    Task owned by a shelter.

    completed_at and completed_by_id are both set when the task is completed
    and both cleared when it is reopened.
    """
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    tag: Mapped[TaskTag] = mapped_column(SQLEnum(TaskTag), nullable=False, default=TaskTag.OTHER)
    priority: Mapped[TaskPriority] = mapped_column(
        SQLEnum(TaskPriority), nullable=False, default=TaskPriority.MEDIUM
    )

    shelter_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("shelters.id", ondelete="CASCADE"), nullable=False, index=True
    )

    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # Kept as a plain id so the completion record survives the user being deleted
    completed_by_id: Mapped[str | None] = mapped_column(String(26), nullable=True, index=True)
    created_by_id: Mapped[str | None] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    comments: Mapped[list["TaskComment"]] = relationship(
        "TaskComment",
        back_populates="task",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="TaskComment.created_at, TaskComment.id",
    )

    __table_args__ = (
        Index("ix_tasks_shelter_completed", "shelter_id", "completed"),
        Index("ix_tasks_shelter_tag", "shelter_id", "tag"),
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title={self.title!r}, shelter_id={self.shelter_id})>"


class TaskComment(Base):
    """Comment on a task. Only reachable through its task."""
    __tablename__ = "task_comments"

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=generate_ulid)
    task_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True
    )
    author_id: Mapped[str | None] = mapped_column(
        String(26), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=datetime.now)

    task: Mapped["Task"] = relationship("Task", back_populates="comments")

    def __repr__(self) -> str:
        return f"<TaskComment(id={self.id}, task_id={self.task_id}, author_id={self.author_id})>"
