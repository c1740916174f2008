"""
Deletion cascades.

Steps run in order within the request's session. A storage error in any
step surfaces as StoreFailure and get_db rolls the whole request back.
"""
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shelterhub.core.errors import ActorNotFound, ConfirmationRequired, store_step
from shelterhub.features.animals.models import Animal
from shelterhub.features.cascades.invariants import find_solo_admin_shelters, plan_transfers
from shelterhub.features.cascades.membership import demote_admin, promote_to_admin
from shelterhub.features.shelters import store
from shelterhub.features.shelters.models import Shelter
from shelterhub.features.tasks.models import Task, TaskComment
from shelterhub.features.users.models import User
from shelterhub.utils import get_logger


log = get_logger(__name__)


@dataclass
class UserDeletionReport:
    user_id: str
    preserved_shelters: list[str] = field(default_factory=list)
    deleted_shelters: list[str] = field(default_factory=list)


async def delete_shelter(db: AsyncSession, shelter_id: str) -> None:
    """
    Delete a shelter together with its tasks (and their comments) and its
    animals, then strip it from every user's admin and member sets.
    """
    shelter_tasks = select(Task.id).where(Task.shelter_id == shelter_id)

    with store_step("delete task comments"):
        await db.execute(
            delete(TaskComment)
            .where(TaskComment.task_id.in_(shelter_tasks))
            .execution_options(synchronize_session="fetch")
        )
    with store_step("delete tasks"):
        await db.execute(
            delete(Task).where(Task.shelter_id == shelter_id).execution_options(synchronize_session="fetch")
        )
    with store_step("delete animals"):
        await db.execute(
            delete(Animal).where(Animal.shelter_id == shelter_id).execution_options(synchronize_session="fetch")
        )
    with store_step("delete memberships"):
        await store.remove_shelter_memberships(db, shelter_id)
    with store_step("delete shelter"):
        await db.execute(
            delete(Shelter).where(Shelter.id == shelter_id).execution_options(synchronize_session="fetch")
        )

    log.info("Shelter %s deleted with its animals and tasks", shelter_id)


async def delete_animal(db: AsyncSession, animal: Animal) -> None:
    with store_step("delete animal"):
        await db.delete(animal)
        await db.flush()
    log.info("Animal %s deleted from shelter %s", animal.id, animal.shelter_id)


async def delete_task(db: AsyncSession, task: Task) -> None:
    with store_step("delete task"):
        await db.delete(task)
        await db.flush()
    log.info("Task %s deleted from shelter %s", task.id, task.shelter_id)


def _shelter_summary(shelter: Shelter) -> dict[str, str]:
    return {"id": shelter.id, "name": shelter.name, "handle": shelter.handle}


async def delete_user(
    db: AsyncSession,
    user_id: str,
    transfers: Optional[dict[str, str]] = None,
    confirm: bool = False,
) -> UserDeletionReport:
    """
    Delete a user without leaving any shelter adminless.

    Shelters where the user is the only admin are handed over to the
    replacement named in `transfers` when that replacement is a current
    member, and deleted otherwise. If there are such shelters and the caller
    sent neither `transfers` nor `confirm`, ConfirmationRequired is raised
    before anything is written.

    Finally the user is pulled from every remaining shelter and deleted.
    """
    user = await db.get(User, user_id)
    if user is None:
        raise ActorNotFound()

    solo_shelters = await find_solo_admin_shelters(db, user_id)
    if solo_shelters and transfers is None and not confirm:
        raise ConfirmationRequired([_shelter_summary(shelter) for shelter in solo_shelters])

    plan = await plan_transfers(db, user_id, solo_shelters, transfers)
    report = UserDeletionReport(user_id=user_id)

    for shelter, replacement_id in plan.preserved:
        await promote_to_admin(db, shelter, replacement_id)
        await demote_admin(db, shelter, user_id, keep_membership=False)
        report.preserved_shelters.append(shelter.id)

    doomed_ids = [shelter.id for shelter in plan.doomed]
    for shelter_id in doomed_ids:
        await delete_shelter(db, shelter_id)
        report.deleted_shelters.append(shelter_id)

    with store_step("delete user memberships"):
        await store.remove_user_memberships(db, user_id)
    with store_step("clear user references"):
        await db.execute(
            update(Animal).where(Animal.created_by_id == user_id)
            .values(created_by_id=None).execution_options(synchronize_session="fetch")
        )
        await db.execute(
            update(Task).where(Task.created_by_id == user_id)
            .values(created_by_id=None).execution_options(synchronize_session="fetch")
        )
        await db.execute(
            update(TaskComment).where(TaskComment.author_id == user_id)
            .values(author_id=None).execution_options(synchronize_session="fetch")
        )
    with store_step("delete user"):
        await db.execute(
            delete(User).where(User.id == user_id).execution_options(synchronize_session="fetch")
        )

    log.info(
        "User %s deleted (preserved shelters: %s, deleted shelters: %s)",
        user_id, report.preserved_shelters, report.deleted_shelters,
    )
    return report
