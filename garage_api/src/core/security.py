from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt
from passlib.context import CryptContext

from src.core.settings import get_app_settings

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_BYTES = 64

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


# PUBLIC_INTERFACE
def get_password_hash(password: str) -> str:
    return _pwd_context.hash(password)


# PUBLIC_INTERFACE
def verify_password(plain_password: str, hashed_password: str) -> bool:
    return _pwd_context.verify(plain_password, hashed_password)


# PUBLIC_INTERFACE
def create_access_token(subject: str, session_id: Optional[str] = None, expires_minutes: Optional[int] = None) -> str:
    """
    Sign a short-lived access token.

    Claims: ``sub`` is the user id, ``sid`` the refresh-token row (login
    session) the token belongs to, ``type`` is always "access".
    """
    settings = get_app_settings()
    issued_at = datetime.now(tz=timezone.utc)
    lifetime = timedelta(minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims: Dict[str, Any] = {
        "sub": subject,
        "type": ACCESS_TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    if session_id:
        claims["sid"] = session_id
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


# PUBLIC_INTERFACE
def decode_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry; raises ``jose.JWTError`` otherwise."""
    settings = get_app_settings()
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])


# PUBLIC_INTERFACE
def generate_refresh_token() -> str:
    """Opaque refresh token; only its database row gives it meaning."""
    return secrets.token_urlsafe(REFRESH_TOKEN_BYTES)
