"""
FastAPI dependencies for authentication.
"""
from typing import Annotated, Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from shelterhub.core.database.engine import get_db
from shelterhub.core.errors import ActorNotFound, MissingActor
from shelterhub.features.users.models import User
from shelterhub.features.users.auth import verify_jwt_token, actor_id_from_claims


security = HTTPBearer(auto_error=False)


async def get_actor_id(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)]
) -> str:
    """
    Get the verified user id from the bearer token.

    The user id is taken from the token alone; nothing is looked up, so this
    also works for callers that have not registered a profile yet.
    """
    if credentials is None:
        raise MissingActor("Authorization token not provided")

    payload = verify_jwt_token(credentials.credentials)
    actor_id = actor_id_from_claims(payload)
    if not actor_id:
        raise MissingActor()
    return actor_id


async def get_current_user(
    actor_id: Annotated[str, Depends(get_actor_id)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> User:
    """
    Get the current authenticated user's profile.

    Usage:
        @router.get("/me")
        async def get_me(user: User = Depends(get_current_user)):
            return user
    """
    user = await db.get(User, actor_id)
    if user is None:
        raise ActorNotFound("No profile registered for this account")
    return user


def get_authorization_header(request) -> str:
    """
    Extract authorization header for rate limiting.
    Used with slowapi Limiter.
    """
    auth = request.headers.get("Authorization", "")
    return auth or "anonymous"
