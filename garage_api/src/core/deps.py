from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.logging import user_id_var
from src.core.security import ACCESS_TOKEN_TYPE, decode_token
from src.db.models.security import User
from src.db.session import get_async_session
from src.repositories.security import UserRepository
from src.services.auth import ClientInfo

logger = logging.getLogger(__name__)

# OAuth2 bearer (used by docs); login endpoint path referenced here
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


@dataclass
class CurrentUser:
    """Authenticated caller: user id, the login session behind the token, and the loaded user."""

    id: UUID
    session_id: Optional[UUID]
    user: User


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail={"code": "Auth.TokenInvalid", "description": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


def _as_uuid(value) -> Optional[UUID]:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        return None


# PUBLIC_INTERFACE
async def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_async_session),
) -> CurrentUser:
    """
    Resolve the Authorization bearer token into the calling user.

    The token must be a valid access token whose ``sub`` names an existing
    user; ``sid`` (the login session) is optional.
    """
    try:
        payload = decode_token(token)
    except JWTError:
        raise _unauthorized("Invalid token")

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise _unauthorized("Invalid token type")

    user_id = _as_uuid(payload.get("sub"))
    if user_id is None:
        raise _unauthorized("Invalid token")

    user = await UserRepository(session).get_user_by_id(user_id)
    if not user:
        raise _unauthorized("User not found")

    user_id_var.set(str(user.id))
    return CurrentUser(id=user.id, session_id=_as_uuid(payload.get("sid")), user=user)


# PUBLIC_INTERFACE
def get_client_info(request: Request) -> ClientInfo:
    """Client address and User-Agent of the request, recorded on login sessions."""
    forwarded = request.headers.get("X-Forwarded-For")
    ip = forwarded.split(",")[0].strip() if forwarded else (request.client.host if request.client else None)
    return ClientInfo(ip_address=ip, user_agent=request.headers.get("User-Agent"))
