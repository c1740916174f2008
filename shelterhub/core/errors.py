"""
Error taxonomy shared by the resolver, the guards and the cascade engine.

Every error carries a stable machine-readable ``kind`` and a human-readable
``message``. The HTTP status lives on the class so the exception handler in
``main.py`` can render any of them without knowing the details.
"""
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import status
from sqlalchemy.exc import SQLAlchemyError

from shelterhub.utils import get_logger


log = get_logger(__name__)


class ShelterHubError(Exception):
    """Base class for all domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request could not be processed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


# Resolution failures

class MissingActor(ShelterHubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "User id not found in token"


class OrganizationUnresolvable(ShelterHubError):
    default_message = "Could not determine the shelter for this request"


class OrganizationNotFound(ShelterHubError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Shelter not found"


class SubjectNotFound(ShelterHubError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Requested entity not found"


class ActorNotFound(ShelterHubError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "User not found"


class Forbidden(ShelterHubError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You do not have permission to perform this action"


# State preconditions

class AlreadyMember(ShelterHubError):
    default_message = "User is already a member of this shelter"


class AlreadyAdmin(ShelterHubError):
    default_message = "User is already an admin of this shelter"


class NotAMember(ShelterHubError):
    default_message = "User is not a member of this shelter"


class NotAnAdmin(ShelterHubError):
    default_message = "User is not an admin of this shelter"


class SoleAdminRemoval(ShelterHubError):
    default_message = (
        "You are the only admin of this shelter. "
        "Transfer the admin role to another member or delete the shelter"
    )


class HandleTaken(ShelterHubError):
    default_message = "This handle is already in use"


class ConfirmationRequired(ShelterHubError):
    """
    Raised by the user deletion flow when the user is the only admin of one
    or more shelters and the client has neither confirmed nor supplied
    replacement admins. Nothing has been written when this is raised.
    """
    status_code = status.HTTP_409_CONFLICT
    default_message = (
        "You are the only admin of some shelters. Confirm their deletion "
        "or choose a new admin for each of them"
    )

    def __init__(self, organizations: list[dict[str, Any]], message: str | None = None):
        super().__init__(message)
        self.organizations = organizations

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["organizations"] = self.organizations
        return payload


class StoreFailure(ShelterHubError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Storage error"


@contextmanager
def store_step(step: str) -> Iterator[None]:
    """
    Run one cascade step, turning storage errors into StoreFailure.

    Usage:
        with store_step("delete tasks"):
            await db.execute(delete(Task).where(Task.shelter_id == shelter_id))
    """
    try:
        yield
    except SQLAlchemyError as e:
        log.error("Store failure during %r: %s", step, e)
        raise StoreFailure(f"Storage error during {step}") from e
