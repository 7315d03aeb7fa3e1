from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.db.base import Base, TimestampMixin, UUIDPkMixin

if TYPE_CHECKING:
    from src.db.models.vehicles import Vehicle


class User(UUIDPkMixin, TimestampMixin, Base):
    """Application user; owns vehicles and login sessions."""
    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(64), nullable=False)
    last_name: Mapped[str] = mapped_column(String(64), nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)

    vehicles: Mapped[List["Vehicle"]] = relationship(
        "Vehicle",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    refresh_tokens: Mapped[List["RefreshToken"]] = relationship(
        "RefreshToken",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class RefreshToken(UUIDPkMixin, TimestampMixin, Base):
    """Opaque refresh token; one row per logged-in device (session)."""
    __tablename__ = "refresh_tokens"

    token: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    session_duration_days: Mapped[int] = mapped_column(Integer, nullable=False)
    is_revoked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    replaced_by_token: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    device_name: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )

    user: Mapped["User"] = relationship("User", back_populates="refresh_tokens", lazy="selectin")
