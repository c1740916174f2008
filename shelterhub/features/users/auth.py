"""
Bearer token verification.

Tokens are issued by the auth service; this module only verifies the
signature and expiry and hands back the decoded claims.
"""
from typing import Any, Optional

import jwt

from shelterhub.core import config
from shelterhub.core.errors import MissingActor
from shelterhub.utils import get_logger


log = get_logger(__name__)

# The auth service puts the user id in `_id`; plain JWT issuers use `sub`.
ACTOR_ID_CLAIMS = ("_id", "sub")


def verify_jwt_token(token: str) -> dict[str, Any]:
    """
    Verify a JWT and return its payload.

    Args:
        token: JWT from the Authorization header

    Returns:
        Decoded JWT payload

    Raises:
        MissingActor: if the token is invalid or expired
    """
    try:
        return jwt.decode(
            token,
            config.TOKEN_SECRET,
            algorithms=[config.TOKEN_ALGORITHM],
            options={"verify_exp": True},
        )
    except jwt.ExpiredSignatureError:
        raise MissingActor("Token has expired")
    except jwt.InvalidTokenError as e:
        log.info("Rejected bearer token: %s", e)
        raise MissingActor(f"Invalid token: {str(e)}")


def actor_id_from_claims(payload: dict[str, Any]) -> Optional[str]:
    """Pick the user id out of a decoded token payload."""
    for claim in ACTOR_ID_CLAIMS:
        value = payload.get(claim)
        if isinstance(value, str) and value:
            return value
    return None
