"""
Membership primitives over the shelter_memberships table.

Shelter.admins / Shelter.members and User.administered_shelters /
User.joined_shelters are all projections of the same rows, so every write
here updates both sides at once.
"""
from datetime import datetime

from sqlalchemy import select, insert, update, delete, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from shelterhub.features.shelters.models import MembershipRole, PromotedFrom, shelter_memberships


def _membership(shelter_id: str, user_id: str):
    return and_(
        shelter_memberships.c.shelter_id == shelter_id,
        shelter_memberships.c.user_id == user_id,
    )


async def get_role(db: AsyncSession, shelter_id: str, user_id: str) -> MembershipRole | None:
    """Return the user's role in the shelter, or None if they hold no role."""
    result = await db.execute(
        select(shelter_memberships.c.role).where(_membership(shelter_id, user_id))
    )
    return result.scalar_one_or_none()


async def get_promoted_from(db: AsyncSession, shelter_id: str, user_id: str) -> PromotedFrom | None:
    result = await db.execute(
        select(shelter_memberships.c.promoted_from).where(_membership(shelter_id, user_id))
    )
    return result.scalar_one_or_none()


async def list_user_ids(db: AsyncSession, shelter_id: str, role: MembershipRole) -> list[str]:
    """Shelter-side projection: ids of users holding `role` in the shelter."""
    result = await db.execute(
        select(shelter_memberships.c.user_id)
        .where(
            shelter_memberships.c.shelter_id == shelter_id,
            shelter_memberships.c.role == role,
        )
        .order_by(shelter_memberships.c.joined_at, shelter_memberships.c.user_id)
    )
    return list(result.scalars().all())


async def list_shelter_ids(db: AsyncSession, user_id: str, role: MembershipRole) -> list[str]:
    """User-side projection: ids of shelters where the user holds `role`."""
    result = await db.execute(
        select(shelter_memberships.c.shelter_id)
        .where(
            shelter_memberships.c.user_id == user_id,
            shelter_memberships.c.role == role,
        )
        .order_by(shelter_memberships.c.joined_at, shelter_memberships.c.shelter_id)
    )
    return list(result.scalars().all())


async def count_admins(db: AsyncSession, shelter_id: str) -> int:
    result = await db.execute(
        select(func.count())
        .select_from(shelter_memberships)
        .where(
            shelter_memberships.c.shelter_id == shelter_id,
            shelter_memberships.c.role == MembershipRole.ADMIN,
        )
    )
    return result.scalar_one()


async def add_membership(
    db: AsyncSession,
    shelter_id: str,
    user_id: str,
    role: MembershipRole,
    promoted_from: PromotedFrom | None = None,
) -> None:
    await db.execute(
        insert(shelter_memberships).values(
            user_id=user_id,
            shelter_id=shelter_id,
            role=role,
            promoted_from=promoted_from,
            joined_at=datetime.now(),
        )
    )


async def set_role(
    db: AsyncSession,
    shelter_id: str,
    user_id: str,
    role: MembershipRole,
    promoted_from: PromotedFrom | None = None,
) -> None:
    """Move an existing membership to `role`, or create it if the user has none."""
    result = await db.execute(
        update(shelter_memberships)
        .where(_membership(shelter_id, user_id))
        .values(role=role, promoted_from=promoted_from)
    )
    if result.rowcount == 0:
        await add_membership(db, shelter_id, user_id, role, promoted_from)


async def remove_membership(db: AsyncSession, shelter_id: str, user_id: str) -> None:
    await db.execute(delete(shelter_memberships).where(_membership(shelter_id, user_id)))


async def remove_shelter_memberships(db: AsyncSession, shelter_id: str) -> None:
    """Strip a shelter from every user's administered and joined sets."""
    await db.execute(
        delete(shelter_memberships).where(shelter_memberships.c.shelter_id == shelter_id)
    )


async def remove_user_memberships(db: AsyncSession, user_id: str) -> None:
    """Pull a user out of every shelter's admins and members sets."""
    await db.execute(
        delete(shelter_memberships).where(shelter_memberships.c.user_id == user_id)
    )
