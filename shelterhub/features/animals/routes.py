"""
Animal feature routes.

Reads are public. Writes need the admin role in the owning shelter, which
is resolved from the body on creation and from the animal itself after.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shelterhub.core.database.engine import get_db
from shelterhub.core.errors import SubjectNotFound
from shelterhub.features.animals.models import AdoptionStatus, Animal, Species
from shelterhub.features.animals.schemas import AnimalCreate, AnimalResponse, AnimalUpdate
from shelterhub.features.cascades.deletion import delete_animal as delete_animal_cascade
from shelterhub.features.permissions.context import AccessContext
from shelterhub.features.permissions.guards import admin_access
from shelterhub.utils import get_logger


log = get_logger(__name__)

router = APIRouter(tags=["animals"])


@router.get("/", response_model=list[AnimalResponse])
async def list_animals(
    db: Annotated[AsyncSession, Depends(get_db)],
    shelter_id: str | None = None,
    species: Species | None = None,
    animal_status: AdoptionStatus | None = Query(default=None, alias="status"),
    skip: int = 0,
    limit: int = Query(default=50, le=200)
):
    """List animals, optionally filtered by shelter, species and status."""
    query = select(Animal)
    if shelter_id:
        query = query.where(Animal.shelter_id == shelter_id)
    if species:
        query = query.where(Animal.species == species)
    if animal_status:
        query = query.where(Animal.status == animal_status)

    query = query.order_by(Animal.arrival_date.desc(), Animal.id).offset(skip).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


@router.get("/{animal_id}", response_model=AnimalResponse)
async def get_animal(
    animal_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Get an animal by ID."""
    animal = await db.get(Animal, animal_id)
    if animal is None:
        raise SubjectNotFound("Animal not found")
    return animal


@router.post("/", response_model=AnimalResponse, status_code=status.HTTP_201_CREATED)
async def create_animal(
    animal_data: AnimalCreate,
    ctx: Annotated[AccessContext, Depends(admin_access())],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Register an animal in a shelter (shelter admins only)."""
    animal_dict = animal_data.model_dump(exclude={"shelter_id", "arrival_date"})
    new_animal = Animal(
        **animal_dict,
        shelter_id=ctx.shelter_id,
        created_by_id=ctx.actor_id,
    )
    if animal_data.arrival_date is not None:
        new_animal.arrival_date = animal_data.arrival_date

    db.add(new_animal)
    await db.commit()
    await db.refresh(new_animal)

    log.info("Animal %s added to shelter %s by %s", new_animal.id, ctx.shelter_id, ctx.actor_id)
    return new_animal


@router.patch("/{animal_id}", response_model=AnimalResponse)
async def update_animal(
    update_data: AnimalUpdate,
    ctx: Annotated[AccessContext, Depends(admin_access("animals"))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update an animal (shelter admins only)."""
    animal = ctx.animal
    for field, value in update_data.model_dump(exclude_unset=True).items():
        setattr(animal, field, value)

    await db.commit()
    await db.refresh(animal)
    return animal


@router.delete("/{animal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_animal(
    ctx: Annotated[AccessContext, Depends(admin_access("animals"))],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Delete an animal (shelter admins only)."""
    await delete_animal_cascade(db, ctx.animal)
    await db.commit()
