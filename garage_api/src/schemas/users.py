from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class UserRead(BaseModel):
    """User read model."""
    id: UUID = Field(..., description="User ID")
    email: EmailStr = Field(..., description="User email")
    first_name: str = Field(...)
    last_name: str = Field(...)
    created_at: datetime = Field(..., description="Created timestamp")
    updated_at: datetime = Field(..., description="Updated timestamp")

    class Config:
        from_attributes = True


class UserUpdate(BaseModel):
    """Profile update payload."""
    first_name: str = Field(..., min_length=1, max_length=64)
    last_name: str = Field(..., min_length=1, max_length=64)


class SessionRead(BaseModel):
    """A login session (refresh token row) of the current user."""
    id: UUID = Field(..., description="Session ID")
    device_name: Optional[str] = Field(None)
    ip_address: Optional[str] = Field(None)
    user_agent: Optional[str] = Field(None)
    created_at: datetime = Field(..., description="Login time")
    expires_at: datetime = Field(..., description="Session expiry")
    is_current: bool = Field(False, description="Whether this is the session of the calling token")

    class Config:
        from_attributes = True
