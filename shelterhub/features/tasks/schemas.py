"""
Pydantic schemas for task-related requests and responses.
"""
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from shelterhub.features.tasks.models import TaskPriority, TaskTag


class TaskBase(BaseModel):
    """Base task schema."""
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=5000)
    tag: TaskTag = TaskTag.OTHER
    priority: TaskPriority = TaskPriority.MEDIUM


class TaskCreate(TaskBase):
    """Schema for creating a task (shelter admins only)."""
    shelter_id: str = Field(..., description="Shelter that will own the task")


class TaskUpdate(BaseModel):
    """Schema for updating a task. The owning shelter can't be changed."""
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    tag: TaskTag | None = None
    priority: TaskPriority | None = None

    @field_validator("title", "description", "tag", "priority")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)


class CommentResponse(BaseModel):
    id: str
    author_id: str | None = None
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TaskResponse(TaskBase):
    """Schema for task responses."""
    id: str
    shelter_id: str
    completed: bool
    completed_at: datetime | None = None
    completed_by_id: str | None = None
    created_by_id: str | None = None
    created_at: datetime
    updated_at: datetime
    comments: list[CommentResponse] = Field(default_factory=list)

    model_config = {"from_attributes": True}
