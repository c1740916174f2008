"""
Shelter context resolution.

Given what a request carries (an explicit shelter id, an already loaded
task, a task or animal id from the path, or a shelter id in the body) and
the calling user's id, work out which shelter the request targets and the
user's role in it.

The sources are tried in a fixed order and the first one that yields a
shelter id wins. Callers rely on that order, e.g. an explicit shelter id in
the path always beats a shelter id sent in the body.
"""
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Literal, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shelterhub.core.errors import (
    MissingActor,
    OrganizationNotFound,
    OrganizationUnresolvable,
    SubjectNotFound,
)
from shelterhub.features.animals.models import Animal
from shelterhub.features.shelters import store
from shelterhub.features.shelters.models import MembershipRole, Shelter
from shelterhub.features.tasks.models import Task
from shelterhub.utils import get_logger


log = get_logger(__name__)

Subject = Literal["tasks", "animals"]


@dataclass(frozen=True)
class ResolutionRequest:
    """Addressing information extracted from an inbound request."""
    actor_id: Optional[str]
    shelter_id: Optional[str] = None
    task: Optional[Task] = None
    subject: Optional[Subject] = None
    subject_id: Optional[str] = None
    body_shelter_id: Optional[str] = None


@dataclass(frozen=True)
class Resolution:
    """Outcome of a single strategy: the shelter id plus any entity fetched on the way."""
    shelter_id: str
    source: str
    task: Optional[Task] = None
    animal: Optional[Animal] = None


@dataclass(frozen=True)
class AccessContext:
    """
    Resolved shelter and role for the current user.

    Built once per request and passed down to guards and handlers, which
    read the shelter snapshot and the fetched task/animal from here instead
    of querying again.
    """
    actor_id: str
    shelter: Shelter
    role: Optional[MembershipRole]
    source: str
    task: Optional[Task] = field(default=None, compare=False)
    animal: Optional[Animal] = field(default=None, compare=False)

    @property
    def shelter_id(self) -> str:
        return self.shelter.id

    @property
    def is_admin(self) -> bool:
        return self.role == MembershipRole.ADMIN

    @property
    def is_member(self) -> bool:
        return self.role == MembershipRole.MEMBER

    @property
    def is_any_member(self) -> bool:
        return self.is_admin or self.is_member


Strategy = Callable[[ResolutionRequest, AsyncSession], Awaitable[Optional[Resolution]]]


async def from_explicit_shelter(request: ResolutionRequest, db: AsyncSession) -> Optional[Resolution]:
    if request.shelter_id:
        return Resolution(request.shelter_id, "path")
    return None


async def from_loaded_task(request: ResolutionRequest, db: AsyncSession) -> Optional[Resolution]:
    if request.task is not None:
        return Resolution(request.task.shelter_id, "task", task=request.task)
    return None


async def from_task_path(request: ResolutionRequest, db: AsyncSession) -> Optional[Resolution]:
    if request.subject != "tasks" or not request.subject_id:
        return None
    task = await db.get(Task, request.subject_id)
    if task is None:
        raise SubjectNotFound("Task not found")
    return Resolution(task.shelter_id, "task", task=task)


async def from_animal_path(request: ResolutionRequest, db: AsyncSession) -> Optional[Resolution]:
    if request.subject != "animals" or not request.subject_id:
        return None
    animal = await db.get(Animal, request.subject_id)
    if animal is None:
        raise SubjectNotFound("Animal not found")
    return Resolution(animal.shelter_id, "animal", animal=animal)


async def from_body(request: ResolutionRequest, db: AsyncSession) -> Optional[Resolution]:
    if request.body_shelter_id:
        return Resolution(request.body_shelter_id, "body")
    return None


RESOLUTION_STRATEGIES: tuple[Strategy, ...] = (
    from_explicit_shelter,
    from_loaded_task,
    from_task_path,
    from_animal_path,
    from_body,
)


async def find_shelter_id(
    request: ResolutionRequest,
    db: AsyncSession,
    strategies: tuple[Strategy, ...] = RESOLUTION_STRATEGIES,
) -> Resolution:
    """Run the strategies in order and return the first resolution."""
    for strategy in strategies:
        resolution = await strategy(request, db)
        if resolution is not None:
            return resolution
    raise OrganizationUnresolvable()


async def resolve_access(request: ResolutionRequest, db: AsyncSession) -> AccessContext:
    """
    Resolve the target shelter and the user's role in it.

    Raises:
        MissingActor: no user id in the claim
        OrganizationUnresolvable: no source named a shelter
        OrganizationNotFound: the shelter does not exist
        SubjectNotFound: a task/animal id was given but does not exist
    """
    if not request.actor_id:
        raise MissingActor()

    resolution = await find_shelter_id(request, db)

    result = await db.execute(select(Shelter).where(Shelter.id == resolution.shelter_id))
    shelter = result.scalar_one_or_none()
    if shelter is None:
        raise OrganizationNotFound()

    role = await store.get_role(db, shelter.id, request.actor_id)
    log.debug(
        "Resolved shelter %s via %s for user %s (role=%s)",
        shelter.id, resolution.source, request.actor_id, role.value if role else None,
    )

    return AccessContext(
        actor_id=request.actor_id,
        shelter=shelter,
        role=role,
        source=resolution.source,
        task=resolution.task,
        animal=resolution.animal,
    )
