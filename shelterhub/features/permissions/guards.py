"""
Role gates.

The predicates only look at a resolved AccessContext and never touch the
database. The *_access factories compose them with the resolver into
FastAPI dependencies.

Usage:
    @router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
    async def delete_task(
        ctx: Annotated[AccessContext, Depends(admin_access("tasks"))],
        db: Annotated[AsyncSession, Depends(get_db)],
    ):
        ...
"""
from functools import cache
from typing import Annotated, Optional

from fastapi import Depends

from shelterhub.core.errors import Forbidden
from shelterhub.features.permissions.context import AccessContext, Subject
from shelterhub.features.permissions.dependencies import access_context


def require_member(ctx: AccessContext) -> AccessContext:
    """Pass if the user is an admin or a member of the shelter."""
    if not ctx.is_any_member:
        raise Forbidden("You are not a member of this shelter")
    return ctx


def require_admin(ctx: AccessContext) -> AccessContext:
    """Pass only if the user is an admin of the shelter."""
    if not ctx.is_admin:
        raise Forbidden("You do not have admin permissions in this shelter")
    return ctx


def member_access(subject: Optional[Subject] = None):
    """Dependency: resolve the shelter for `subject` and require membership."""
    return _member_access(subject)


@cache
def _member_access(subject: Optional[Subject]):
    async def member_dependency(
        ctx: Annotated[AccessContext, Depends(access_context(subject))]
    ) -> AccessContext:
        return require_member(ctx)

    return member_dependency


def admin_access(subject: Optional[Subject] = None):
    """Dependency: resolve the shelter for `subject` and require the admin role."""
    return _admin_access(subject)


@cache
def _admin_access(subject: Optional[Subject]):
    async def admin_dependency(
        ctx: Annotated[AccessContext, Depends(access_context(subject))]
    ) -> AccessContext:
        return require_admin(ctx)

    return admin_dependency
