"""
FastAPI wiring for the shelter context resolver.

Builds a ResolutionRequest from the path parameters and JSON body and runs
the resolver. FastAPI caches dependency results per request, so every gate
and handler that depends on the same access_context(subject) shares one
AccessContext and one set of lookups.
"""
from functools import cache
from json import JSONDecodeError
from typing import Annotated, Any, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from shelterhub.core.database.engine import get_db
from shelterhub.features.permissions.context import (
    AccessContext,
    ResolutionRequest,
    Subject,
    resolve_access,
)
from shelterhub.features.users.dependencies import get_actor_id


SUBJECT_PATH_PARAMS: dict[str, str] = {
    "tasks": "task_id",
    "animals": "animal_id",
}

BODY_METHODS = {"POST", "PUT", "PATCH"}


async def read_body_shelter_id(request: Request) -> Optional[str]:
    """Return `shelter_id` from a JSON object body, if there is one."""
    if request.method not in BODY_METHODS:
        return None
    if "application/json" not in request.headers.get("content-type", ""):
        return None
    try:
        body: Any = await request.json()
    except (JSONDecodeError, UnicodeDecodeError):
        return None
    if not isinstance(body, dict):
        return None
    shelter_id = body.get("shelter_id")
    return shelter_id if isinstance(shelter_id, str) and shelter_id else None


def build_resolution_request(
    actor_id: Optional[str],
    path_params: dict[str, Any],
    subject: Optional[Subject],
    body_shelter_id: Optional[str],
    query_params: Optional[dict[str, Any]] = None,
) -> ResolutionRequest:
    """
    An explicit shelter id comes from the path. Routes without a task or
    animal subject may also pass it in the query string (listing endpoints).
    """
    subject_id = path_params.get(SUBJECT_PATH_PARAMS[subject]) if subject else None
    explicit_shelter_id = path_params.get("shelter_id")
    if not explicit_shelter_id and subject is None:
        explicit_shelter_id = (query_params or {}).get("shelter_id")
    return ResolutionRequest(
        actor_id=actor_id,
        shelter_id=explicit_shelter_id or None,
        subject=subject,
        subject_id=subject_id,
        body_shelter_id=body_shelter_id,
    )


def access_context(subject: Optional[Subject] = None):
    """
    Dependency factory returning the resolved AccessContext.

    Args:
        subject: "tasks" or "animals" when the route's path id names a task
            or an animal, None for shelter routes and creation flows
    """
    return _access_context(subject)


@cache
def _access_context(subject: Optional[Subject]):
    async def access_context_dependency(
        request: Request,
        actor_id: Annotated[str, Depends(get_actor_id)],
        db: Annotated[AsyncSession, Depends(get_db)],
    ) -> AccessContext:
        resolution_request = build_resolution_request(
            actor_id,
            dict(request.path_params),
            subject,
            await read_body_shelter_id(request),
            dict(request.query_params),
        )
        return await resolve_access(resolution_request, db)

    return access_context_dependency
