"""
Shelter feature routes.
"""
from typing import Annotated
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from shelterhub.core.database.engine import get_db
from shelterhub.core.errors import HandleTaken
from shelterhub.features.cascades import membership
from shelterhub.features.cascades.deletion import delete_shelter as delete_shelter_cascade
from shelterhub.features.permissions.context import AccessContext
from shelterhub.features.permissions.guards import admin_access, member_access
from shelterhub.features.shelters import store
from shelterhub.features.shelters.dependencies import build_shelter_response, get_shelter_by_id
from shelterhub.features.shelters.models import MembershipRole, Shelter, shelter_memberships
from shelterhub.features.shelters.schemas import (
    MembershipResponse,
    PromoteAdminRequest,
    ShelterCreate,
    ShelterMember,
    ShelterPublic,
    ShelterResponse,
    ShelterUpdate,
)
from shelterhub.features.users.dependencies import get_actor_id, get_current_user
from shelterhub.features.users.models import User
from shelterhub.utils import get_logger


log = get_logger(__name__)

router = APIRouter(tags=["shelters"])


# Shelter CRUD endpoints
@router.post("/", response_model=ShelterResponse, status_code=status.HTTP_201_CREATED)
async def create_shelter(
    shelter_data: ShelterCreate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Create a new shelter. The creator becomes its only admin."""
    result = await db.execute(select(Shelter.id).where(Shelter.handle == shelter_data.handle))
    if result.scalar_one_or_none() is not None:
        raise HandleTaken("A shelter with this handle already exists")

    new_shelter = Shelter(**shelter_data.model_dump())
    db.add(new_shelter)
    await db.flush()

    await store.add_membership(db, new_shelter.id, user.id, MembershipRole.ADMIN)
    await db.commit()
    await db.refresh(new_shelter)

    log.info("Shelter %s (%s) created by %s", new_shelter.id, new_shelter.handle, user.id)
    return await build_shelter_response(db, new_shelter)


@router.get("/", response_model=list[ShelterPublic])
async def list_shelters(
    db: Annotated[AsyncSession, Depends(get_db)],
    skip: int = 0,
    limit: int = Query(default=50, le=200)
):
    """List shelters (public info only)."""
    result = await db.execute(
        select(Shelter).order_by(Shelter.name, Shelter.id).offset(skip).limit(limit)
    )
    return result.scalars().all()


@router.get("/{shelter_id}", response_model=ShelterResponse)
async def get_shelter(
    shelter: Annotated[Shelter, Depends(get_shelter_by_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Get shelter by ID."""
    return await build_shelter_response(db, shelter)


@router.patch("/{shelter_id}", response_model=ShelterResponse)
async def update_shelter(
    update_data: ShelterUpdate,
    ctx: Annotated[AccessContext, Depends(admin_access())],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update shelter information (admins only)."""
    shelter = ctx.shelter
    update_dict = update_data.model_dump(exclude_unset=True)
    for field, value in update_dict.items():
        setattr(shelter, field, value)

    await db.commit()
    await db.refresh(shelter)
    return await build_shelter_response(db, shelter)


@router.delete("/{shelter_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_shelter(
    ctx: Annotated[AccessContext, Depends(admin_access())],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Delete a shelter with all its animals and tasks (admins only)."""
    await delete_shelter_cascade(db, ctx.shelter_id)
    await db.commit()


# Membership endpoints
@router.get("/{shelter_id}/members", response_model=list[ShelterMember])
async def list_shelter_members(
    ctx: Annotated[AccessContext, Depends(member_access())],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """List admins and members of a shelter (members only)."""
    result = await db.execute(
        select(User.id, User.username, User.name, shelter_memberships.c.role, shelter_memberships.c.joined_at)
        .join(shelter_memberships, shelter_memberships.c.user_id == User.id)
        .where(shelter_memberships.c.shelter_id == ctx.shelter_id)
        .order_by(shelter_memberships.c.role, shelter_memberships.c.joined_at)
    )
    return [
        ShelterMember(user_id=row.id, username=row.username, name=row.name, role=row.role, joined_at=row.joined_at)
        for row in result
    ]


@router.post("/{shelter_id}/join", response_model=MembershipResponse)
async def join_shelter(
    shelter: Annotated[Shelter, Depends(get_shelter_by_id)],
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Join a shelter as a member."""
    await membership.join_shelter(db, shelter, user.id)
    await db.commit()
    return MembershipResponse(
        message="Joined shelter successfully",
        shelter_id=shelter.id,
        user_id=user.id,
        role=MembershipRole.MEMBER,
    )


@router.post("/{shelter_id}/leave", response_model=MembershipResponse)
async def leave_shelter(
    shelter: Annotated[Shelter, Depends(get_shelter_by_id)],
    actor_id: Annotated[str, Depends(get_actor_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Leave a shelter. Admins have to hand over or step down first."""
    await membership.leave_shelter(db, shelter, actor_id)
    await db.commit()
    return MembershipResponse(message="Left shelter successfully", shelter_id=shelter.id, user_id=actor_id)


@router.post("/{shelter_id}/admins", response_model=MembershipResponse)
async def promote_admin(
    promote_data: PromoteAdminRequest,
    ctx: Annotated[AccessContext, Depends(admin_access())],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Grant the admin role to a user (admins only)."""
    changed = await membership.promote_to_admin(db, ctx.shelter, promote_data.user_id)
    await db.commit()
    return MembershipResponse(
        message="User promoted to admin" if changed else "User is already an admin",
        shelter_id=ctx.shelter_id,
        user_id=promote_data.user_id,
        role=MembershipRole.ADMIN,
    )


@router.delete("/{shelter_id}/admins/{user_id}", response_model=MembershipResponse)
async def demote_admin(
    user_id: str,
    ctx: Annotated[AccessContext, Depends(admin_access())],
    db: Annotated[AsyncSession, Depends(get_db)],
    replacement_id: str | None = Query(default=None, description="Member who takes over if this is the last admin"),
    keep_membership: bool = Query(default=True, description="Restore the role held before promotion instead of removing the user")
):
    """Remove a user from the shelter's admins (admins only)."""
    new_role = await membership.demote_admin(
        db, ctx.shelter, user_id, replacement_id=replacement_id, keep_membership=keep_membership
    )
    await db.commit()
    return MembershipResponse(
        message="Admin role removed",
        shelter_id=ctx.shelter_id,
        user_id=user_id,
        role=new_role,
    )


@router.delete("/{shelter_id}/members/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    user_id: str,
    ctx: Annotated[AccessContext, Depends(admin_access())],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Remove a member from the shelter (admins only)."""
    await membership.remove_member(db, ctx.shelter, user_id)
    await db.commit()
