"""
Sole-admin checks run before a user is deleted.

A shelter must always have at least one admin. Before a user goes away we
find the shelters where they are the only admin and decide, per shelter,
whether a named replacement takes over or the shelter is torn down.
"""
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from shelterhub.features.cascades.membership import is_valid_replacement
from shelterhub.features.shelters.models import MembershipRole, Shelter, shelter_memberships
from shelterhub.features.users.models import User
from shelterhub.utils import get_logger


log = get_logger(__name__)


@dataclass
class TransferPlan:
    preserved: list[tuple[Shelter, str]] = field(default_factory=list)
    doomed: list[Shelter] = field(default_factory=list)


async def find_solo_admin_shelters(db: AsyncSession, user_id: str) -> list[Shelter]:
    """Shelters whose admins set is exactly {user_id}."""
    admins = shelter_memberships.alias("admins")
    admin_counts = (
        select(admins.c.shelter_id)
        .where(admins.c.role == MembershipRole.ADMIN)
        .group_by(admins.c.shelter_id)
        .having(func.count() == 1)
    )
    result = await db.execute(
        select(Shelter)
        .join(shelter_memberships, shelter_memberships.c.shelter_id == Shelter.id)
        .where(
            shelter_memberships.c.user_id == user_id,
            shelter_memberships.c.role == MembershipRole.ADMIN,
            Shelter.id.in_(admin_counts),
        )
        .order_by(Shelter.name, Shelter.id)
    )
    return list(result.scalars().all())


async def plan_transfers(
    db: AsyncSession,
    user_id: str,
    solo_shelters: list[Shelter],
    transfers: Optional[dict[str, str]],
) -> TransferPlan:
    """
    Split sole-admin shelters into those handed over to a replacement and
    those to be deleted.

    Invalid entries are skipped and their shelter is deleted. An entry is
    invalid if the replacement does not exist, is not a current member of
    the shelter, or is the departing user. Entries for shelters that are not
    sole-admin shelters of the user are ignored.
    """
    transfers = transfers or {}
    plan = TransferPlan()

    for shelter in solo_shelters:
        replacement_id = transfers.get(shelter.id)
        if (
            replacement_id
            and replacement_id != user_id
            and await db.get(User, replacement_id) is not None
            and await is_valid_replacement(db, shelter.id, replacement_id)
        ):
            plan.preserved.append((shelter, replacement_id))
            continue
        if replacement_id:
            log.info(
                "Skipping transfer of shelter %s to %s: not a current member",
                shelter.id, replacement_id,
            )
        plan.doomed.append(shelter)

    unknown = set(transfers) - {shelter.id for shelter in solo_shelters}
    if unknown:
        log.info("Ignoring transfers for shelters not solely run by %s: %s", user_id, sorted(unknown))

    return plan
