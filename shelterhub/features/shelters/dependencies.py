"""
Shelter-related dependency injection functions.
"""
from typing import Annotated
from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shelterhub.core.database.engine import get_db
from shelterhub.core.errors import OrganizationNotFound
from shelterhub.features.animals.models import Animal
from shelterhub.features.shelters import store
from shelterhub.features.shelters.models import MembershipRole, Shelter
from shelterhub.features.shelters.schemas import ShelterResponse
from shelterhub.features.tasks.models import Task


async def get_shelter_by_id(
    shelter_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
) -> Shelter:
    """
    Get shelter by ID.

    Raises:
        OrganizationNotFound: 404 if shelter not found
    """
    result = await db.execute(
        select(Shelter).where(Shelter.id == shelter_id)
    )
    shelter = result.scalar_one_or_none()

    if shelter is None:
        raise OrganizationNotFound()

    return shelter


async def build_shelter_response(db: AsyncSession, shelter: Shelter) -> ShelterResponse:
    """Shelter response with its admin, member, animal and task id sets filled in."""
    animal_ids = await db.execute(
        select(Animal.id).where(Animal.shelter_id == shelter.id).order_by(Animal.id)
    )
    task_ids = await db.execute(
        select(Task.id).where(Task.shelter_id == shelter.id).order_by(Task.id)
    )

    response = ShelterResponse.model_validate(shelter)
    response.admins = await store.list_user_ids(db, shelter.id, MembershipRole.ADMIN)
    response.members = await store.list_user_ids(db, shelter.id, MembershipRole.MEMBER)
    response.animals = list(animal_ids.scalars().all())
    response.tasks = list(task_ids.scalars().all())
    return response
