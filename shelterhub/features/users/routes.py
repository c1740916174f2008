"""
User feature routes.
"""
from typing import Annotated
from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from shelterhub.core.database.engine import get_db
from shelterhub.core.errors import ActorNotFound, HandleTaken
from shelterhub.features.cascades.deletion import delete_user
from shelterhub.features.cascades.invariants import find_solo_admin_shelters
from shelterhub.features.shelters import store
from shelterhub.features.shelters.models import MembershipRole
from shelterhub.features.users.models import User
from shelterhub.features.users.schemas import (
    ShelterSummary,
    UserCreate,
    UserDeletionRequest,
    UserDeletionResponse,
    UserPublic,
    UserResponse,
    UserUpdate,
)
from shelterhub.features.users.dependencies import get_actor_id, get_current_user
from shelterhub.utils import get_logger


log = get_logger(__name__)

router = APIRouter(tags=["users"])


async def build_user_response(db: AsyncSession, user: User) -> UserResponse:
    """User response with the administered and joined shelter projections."""
    response = UserResponse.model_validate(user)
    response.administered_shelters = await store.list_shelter_ids(db, user.id, MembershipRole.ADMIN)
    response.joined_shelters = await store.list_shelter_ids(db, user.id, MembershipRole.MEMBER)
    return response


@router.post("/", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register_profile(
    user_data: UserCreate,
    actor_id: Annotated[str, Depends(get_actor_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Register the profile of the authenticated account."""
    if await db.get(User, actor_id) is not None:
        raise HandleTaken("A profile is already registered for this account")

    result = await db.execute(
        select(User).where(
            or_(User.username == user_data.username, User.email == user_data.email)
        )
    )
    existing = result.scalars().first()
    if existing is not None:
        if existing.username == user_data.username:
            raise HandleTaken("This username is already in use")
        raise HandleTaken("This email is already in use")

    user = User(id=actor_id, **user_data.model_dump())
    db.add(user)
    await db.commit()
    await db.refresh(user)

    log.info("Registered profile %s (%s)", user.id, user.username)
    return await build_user_response(db, user)


@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Get current authenticated user's profile."""
    return await build_user_response(db, user)


@router.patch("/me", response_model=UserResponse)
async def update_current_user_profile(
    update_data: UserUpdate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update current user's profile."""
    # Update only provided fields
    if update_data.name is not None:
        user.name = update_data.name
    if update_data.profile_image is not None:
        user.profile_image = update_data.profile_image
    if update_data.bio is not None:
        user.bio = update_data.bio

    await db.commit()
    await db.refresh(user)
    return await build_user_response(db, user)


@router.get("/me/solo-admin-shelters", response_model=list[ShelterSummary])
async def get_solo_admin_shelters(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Shelters that would lose their only admin if this account were deleted."""
    return await find_solo_admin_shelters(db, user.id)


@router.delete("/me", response_model=UserDeletionResponse)
async def delete_current_user(
    actor_id: Annotated[str, Depends(get_actor_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    deletion: Annotated[UserDeletionRequest | None, Body()] = None
):
    """
    Delete the current account.

    Without `confirm` or `transfers`, responds 409 with the shelters where
    this account is the only admin and changes nothing.
    """
    deletion = deletion or UserDeletionRequest()
    report = await delete_user(db, actor_id, transfers=deletion.transfers, confirm=deletion.confirm)
    await db.commit()
    return UserDeletionResponse(
        message="User deleted successfully",
        preserved_shelters=report.preserved_shelters,
        deleted_shelters=report.deleted_shelters,
    )


@router.get("/{user_id}", response_model=UserPublic)
async def get_user_by_id(
    user_id: str,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Get public user profile by ID."""
    user = await db.get(User, user_id)
    if user is None:
        raise ActorNotFound()
    return user


@router.get("/", response_model=list[UserPublic])
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    skip: int = 0,
    limit: int = Query(default=50, le=200)
):
    """List users (public info only)."""
    result = await db.execute(
        select(User)
        .order_by(User.username)
        .offset(skip)
        .limit(limit)
    )
    return result.scalars().all()
