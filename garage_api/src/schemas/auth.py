from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, EmailStr, Field


def _normalize_email(value: str) -> str:
    return value.strip().lower() if isinstance(value, str) else value


NormalizedEmail = Annotated[EmailStr, BeforeValidator(_normalize_email)]


class TokenPair(BaseModel):
    """Access token plus the opaque refresh token of the login session."""
    token_type: str = Field("bearer", description="Token type, typically 'bearer'")
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="Opaque refresh token")
    refresh_token_expires_at: datetime = Field(..., description="Refresh token (session) expiry, UTC")


class RefreshRequest(BaseModel):
    """Request to rotate a refresh token."""
    refresh_token: str = Field(..., min_length=1, description="Refresh token")


class LogoutRequest(BaseModel):
    """Refresh token of the session to end."""
    refresh_token: str = Field(..., min_length=1, description="Refresh token")


class RegisterRequest(BaseModel):
    """Registration details for creating a new user."""
    email: NormalizedEmail = Field(..., description="User email")
    password: str = Field(..., description="User password (at least 8 characters)")
    first_name: str = Field(..., min_length=1, max_length=64, description="First name")
    last_name: str = Field(..., min_length=1, max_length=64, description="Last name")


class LoginRequest(BaseModel):
    """Credentials for password login."""
    email: NormalizedEmail = Field(..., description="User email")
    password: str = Field(..., min_length=1, description="User password")
    remember_me: bool = Field(False, description="Use the long session duration")


class ChangePasswordRequest(BaseModel):
    """Change the current user's password."""
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., description="New password (at least 8 characters)")
    logout_all_devices: bool = Field(False, description="Delete every other session of the user")
