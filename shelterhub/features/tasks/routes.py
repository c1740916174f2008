"""
Task feature routes.

Tasks are private to their shelter: members can read, complete and comment
on them, admins create, edit and delete them.
"""
from datetime import datetime
from typing import Annotated
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shelterhub.core.database.engine import get_db
from shelterhub.core.errors import Forbidden, SubjectNotFound
from shelterhub.features.cascades.deletion import delete_task as delete_task_cascade
from shelterhub.features.permissions.context import AccessContext
from shelterhub.features.permissions.guards import admin_access, member_access
from shelterhub.features.tasks.models import Task, TaskComment, TaskTag
from shelterhub.features.tasks.schemas import CommentCreate, TaskCreate, TaskResponse, TaskUpdate
from shelterhub.utils import get_logger


log = get_logger(__name__)

router = APIRouter(tags=["tasks"])


async def reload_task(db: AsyncSession, task_id: str) -> Task:
    """Re-read a task and its comments after a write."""
    result = await db.execute(
        select(Task).where(Task.id == task_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


@router.get("/", response_model=list[TaskResponse])
async def list_tasks(
    ctx: Annotated[AccessContext, Depends(member_access())],
    db: Annotated[AsyncSession, Depends(get_db)],
    completed: bool | None = None,
    tag: TaskTag | None = None,
    skip: int = 0,
    limit: int = Query(default=50, le=200)
):
    """List a shelter's tasks (members only). Pass the shelter as ?shelter_id=."""
    query = select(Task).where(Task.shelter_id == ctx.shelter_id)
    if completed is not None:
        query = query.where(Task.completed == completed)
    if tag:
        query = query.where(Task.tag == tag)

    query = query.order_by(Task.completed, Task.created_at.desc(), Task.id).offset(skip).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    ctx: Annotated[AccessContext, Depends(admin_access())],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Create a task in a shelter (shelter admins only)."""
    new_task = Task(
        **task_data.model_dump(exclude={"shelter_id"}),
        shelter_id=ctx.shelter_id,
        created_by_id=ctx.actor_id,
    )
    db.add(new_task)
    await db.commit()
    new_task = await reload_task(db, new_task.id)

    log.info("Task %s created in shelter %s by %s", new_task.id, ctx.shelter_id, ctx.actor_id)
    return new_task


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    ctx: Annotated[AccessContext, Depends(member_access("tasks"))]
):
    """Get a task by ID (members only)."""
    return ctx.task


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    update_data: TaskUpdate,
    ctx: Annotated[AccessContext, Depends(admin_access("tasks"))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update a task (shelter admins only)."""
    task = ctx.task
    for field, value in update_data.model_dump(exclude_unset=True).items():
        setattr(task, field, value)

    await db.commit()
    return await reload_task(db, task.id)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    ctx: Annotated[AccessContext, Depends(admin_access("tasks"))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Delete a task with its comments (shelter admins only)."""
    await delete_task_cascade(db, ctx.task)
    await db.commit()


@router.post("/{task_id}/complete", response_model=TaskResponse)
async def complete_task(
    ctx: Annotated[AccessContext, Depends(member_access("tasks"))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Mark a task as completed by the current user (members only)."""
    task = ctx.task
    if not task.completed:
        task.completed = True
        task.completed_at = datetime.now()
        task.completed_by_id = ctx.actor_id
        await db.commit()
        task = await reload_task(db, task.id)
    return task


@router.post("/{task_id}/reopen", response_model=TaskResponse)
async def reopen_task(
    ctx: Annotated[AccessContext, Depends(member_access("tasks"))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Mark a completed task as pending again (members only)."""
    task = ctx.task
    if task.completed:
        task.completed = False
        task.completed_at = None
        task.completed_by_id = None
        await db.commit()
        task = await reload_task(db, task.id)
    return task


# Comment endpoints
@router.post("/{task_id}/comments", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    comment_data: CommentCreate,
    ctx: Annotated[AccessContext, Depends(member_access("tasks"))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Comment on a task (members only)."""
    task = ctx.task
    task.comments.append(TaskComment(author_id=ctx.actor_id, content=comment_data.content))
    await db.commit()
    return await reload_task(db, task.id)


@router.delete("/{task_id}/comments/{comment_id}", response_model=TaskResponse)
async def delete_comment(
    comment_id: str,
    ctx: Annotated[AccessContext, Depends(member_access("tasks"))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Delete a comment. Only its author or a shelter admin may do this."""
    task = ctx.task
    comment = next((c for c in task.comments if c.id == comment_id), None)
    if comment is None:
        raise SubjectNotFound("Comment not found")
    if comment.author_id != ctx.actor_id and not ctx.is_admin:
        raise Forbidden("Only the author or a shelter admin can delete this comment")

    task.comments.remove(comment)
    await db.commit()
    return await reload_task(db, task.id)
