"""
Bearer credential verification.

The OAuth sign-in lives outside this service; it hands the frontend a
signed JWT whose ``id`` claim is the user's account id. Here we only
verify that token and resolve the account.
"""

import logging
from datetime import UTC, datetime, timedelta
from typing import Annotated, Any

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from floris.config import settings
from floris.db.database import get_session
from floris.db.operations import get_user
from floris.models.db import UserDB
from floris.models.failure import NotFoundError, UnauthorizedError

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(user_id: str, expires_in: timedelta | None = None) -> str:
    """Sign a token for a user. Used by the sign-in collaborator and tests."""
    payload: dict[str, Any] = {"id": user_id, "iat": datetime.now(UTC)}
    if expires_in is not None:
        payload["exp"] = datetime.now(UTC) + expires_in
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> str:
    """
    Verify a bearer token and return the user id it carries.

    Raises:
        UnauthorizedError: If the token is invalid, expired or has no user id
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        logger.debug("Rejected bearer token: %s", e)
        raise UnauthorizedError(detail=type(e).__name__) from e

    user_id = payload.get("id") or payload.get("sub")
    if not user_id:
        raise UnauthorizedError(detail="Token carries no user id")
    return str(user_id)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> UserDB:
    """FastAPI dependency resolving the bearer token to an account."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError(detail="Missing bearer token")

    user_id = decode_access_token(credentials.credentials)
    user = await get_user(session, user_id)
    if user is None:
        raise NotFoundError("User not found", detail=f"user_id={user_id}")
    return user


CurrentUser = Annotated[UserDB, Depends(get_current_user)]
