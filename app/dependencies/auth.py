"""
Caller identity from the session JWT.

Tokens are HS256-signed and carry the user's UUID in a ``user_id`` claim.
"""

import uuid
from typing import Annotated, Optional

import jwt
from fastapi import Depends, Header, HTTPException

from app.core.config import settings
from app.core.logging import get_logger
from app.db.models import User
from app.dependencies.database import SessionDep

logger = get_logger(__name__)


def decode_user_id(token: str) -> uuid.UUID:
    """
    Extract the user ID from a session token.

    Raises:
        HTTPException: 401 when the token is invalid, expired, or has no
            usable ``user_id`` claim.
    """
    try:
        claims = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except jwt.PyJWTError as e:
        logger.debug("Rejected session token: %s", e)
        raise HTTPException(status_code=401, detail="Invalid or expired token") from e

    try:
        return uuid.UUID(str(claims["user_id"]))
    except (KeyError, ValueError) as e:
        raise HTTPException(status_code=401, detail="Invalid user ID in token") from e


async def get_current_user(
    session: SessionDep,
    authorization: Annotated[Optional[str], Header()] = None,
) -> User:
    """Resolve the signed-in user from ``Authorization: Bearer <jwt>``."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header required")

    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token:
        raise HTTPException(status_code=401, detail="Invalid authorization format")

    user = await session.get(User, decode_user_id(token))
    if user is None:
        raise HTTPException(status_code=401, detail="unauthorized")
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]
