"""
Membership cascades: join, leave, promote, demote and member removal.

Every function checks its preconditions before writing anything. Writes go
through features.shelters.store, which keeps the shelter and user views of
a membership in a single row.
"""
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from shelterhub.core.errors import (
    ActorNotFound,
    AlreadyAdmin,
    AlreadyMember,
    NotAMember,
    NotAnAdmin,
    SoleAdminRemoval,
    store_step,
)
from shelterhub.features.shelters import store
from shelterhub.features.shelters.models import MembershipRole, PromotedFrom, Shelter
from shelterhub.features.users.models import User
from shelterhub.utils import get_logger


log = get_logger(__name__)


async def join_shelter(db: AsyncSession, shelter: Shelter, user_id: str) -> None:
    """Add the user to the shelter's members."""
    role = await store.get_role(db, shelter.id, user_id)
    if role == MembershipRole.ADMIN:
        raise AlreadyAdmin("You are already an admin of this shelter")
    if role == MembershipRole.MEMBER:
        raise AlreadyMember("You are already a member of this shelter")

    with store_step("join shelter"):
        await store.add_membership(db, shelter.id, user_id, MembershipRole.MEMBER)
    log.info("User %s joined shelter %s", user_id, shelter.id)


async def leave_shelter(db: AsyncSession, shelter: Shelter, user_id: str) -> None:
    """
    Remove a plain member from the shelter.

    Admins can't leave directly: a sole admin has to transfer the role or
    delete the shelter, other admins have to step down first.
    """
    role = await store.get_role(db, shelter.id, user_id)
    if role == MembershipRole.ADMIN:
        if await store.count_admins(db, shelter.id) <= 1:
            raise SoleAdminRemoval()
        raise AlreadyAdmin("Admins must step down as admin before leaving the shelter")
    if role is None:
        raise NotAMember("You are not a member of this shelter")

    with store_step("leave shelter"):
        await store.remove_membership(db, shelter.id, user_id)
    log.info("User %s left shelter %s", user_id, shelter.id)


async def promote_to_admin(db: AsyncSession, shelter: Shelter, user_id: str) -> bool:
    """
    Make the user an admin of the shelter.

    Members are moved out of the members set; users without a role are
    added directly as admins. The previous role is kept on the row so
    demote_admin can restore it.

    Returns:
        False if the user was already an admin (nothing written), True otherwise
    """
    if await db.get(User, user_id) is None:
        raise ActorNotFound()

    role = await store.get_role(db, shelter.id, user_id)
    if role == MembershipRole.ADMIN:
        return False

    promoted_from = PromotedFrom.MEMBER if role == MembershipRole.MEMBER else PromotedFrom.NONE
    with store_step("promote admin"):
        await store.set_role(db, shelter.id, user_id, MembershipRole.ADMIN, promoted_from)
    log.info("User %s promoted to admin of shelter %s", user_id, shelter.id)
    return True


async def is_valid_replacement(db: AsyncSession, shelter_id: str, user_id: Optional[str]) -> bool:
    """A replacement admin must be a current member (not already admin) of the shelter."""
    if not user_id:
        return False
    return await store.get_role(db, shelter_id, user_id) == MembershipRole.MEMBER


async def demote_admin(
    db: AsyncSession,
    shelter: Shelter,
    target_user_id: str,
    replacement_id: Optional[str] = None,
    keep_membership: bool = True,
) -> Optional[MembershipRole]:
    """
    Remove the target from the shelter's admins.

    If the target is the last admin, `replacement_id` must name a current
    member, who is promoted before the target steps down. Otherwise the
    shelter would be left without an admin and SoleAdminRemoval is raised.

    Args:
        keep_membership: give the target back the role they held before
            promotion (default). Admins who never had a role there leave
            the shelter, everyone else becomes a member. False removes the
            target from the shelter altogether

    Returns:
        The target's role after the demotion, MEMBER or None
    """
    role = await store.get_role(db, shelter.id, target_user_id)
    if role != MembershipRole.ADMIN:
        raise NotAnAdmin()

    if await store.count_admins(db, shelter.id) <= 1:
        if not await is_valid_replacement(db, shelter.id, replacement_id):
            raise SoleAdminRemoval(
                "This is the only admin of the shelter. "
                "Name a current member as replacement or delete the shelter"
            )
        await promote_to_admin(db, shelter, replacement_id)

    new_role = None
    if keep_membership and await store.get_promoted_from(db, shelter.id, target_user_id) != PromotedFrom.NONE:
        new_role = MembershipRole.MEMBER

    with store_step("demote admin"):
        if new_role is not None:
            await store.set_role(db, shelter.id, target_user_id, new_role)
        else:
            await store.remove_membership(db, shelter.id, target_user_id)
    log.info(
        "User %s removed as admin of shelter %s (now: %s)",
        target_user_id, shelter.id, new_role.value if new_role else "no role",
    )
    return new_role


async def remove_member(db: AsyncSession, shelter: Shelter, user_id: str) -> None:
    """Remove a plain member from the shelter on an admin's behalf."""
    role = await store.get_role(db, shelter.id, user_id)
    if role == MembershipRole.ADMIN:
        raise AlreadyAdmin("Admins must be demoted before they can be removed")
    if role is None:
        raise NotAMember()

    with store_step("remove member"):
        await store.remove_membership(db, shelter.id, user_id)
    log.info("User %s removed from shelter %s", user_id, shelter.id)
