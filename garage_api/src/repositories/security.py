from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, select, update

from src.db.models.security import RefreshToken, User
from .base import BaseRepository


class UserRepository(BaseRepository):
    """Repository for user accounts."""

    async def get_user_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(User.email == email)
        return await self.scalar_one_or_none(stmt)

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        stmt = select(User).where(User.id == user_id)
        return await self.scalar_one_or_none(stmt)

    async def email_exists(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email)
        return await self.scalar_one_or_none(stmt) is not None

    async def create_user(
        self, *, email: str, first_name: str, last_name: str, password_hash: str
    ) -> User:
        user = User(
            email=email,
            first_name=first_name,
            last_name=last_name,
            password_hash=password_hash,
        )
        await self.add(user)
        await self.session.flush()
        return user


class RefreshTokenRepository(BaseRepository):
    """Repository for refresh tokens (login sessions)."""

    async def get_by_token(self, token: str) -> Optional[RefreshToken]:
        stmt = select(RefreshToken).where(RefreshToken.token == token)
        return await self.scalar_one_or_none(stmt)

    async def get_for_user(self, session_id: UUID, user_id: UUID) -> Optional[RefreshToken]:
        stmt = select(RefreshToken).where(
            RefreshToken.id == session_id, RefreshToken.user_id == user_id
        )
        return await self.scalar_one_or_none(stmt)

    async def list_active_for_user(self, user_id: UUID, now: datetime) -> List[RefreshToken]:
        stmt = (
            select(RefreshToken)
            .where(
                RefreshToken.user_id == user_id,
                RefreshToken.is_revoked.is_(False),
                RefreshToken.expires_at > now,
            )
            .order_by(RefreshToken.created_at.desc())
        )
        return list(await self.scalars(stmt))

    async def revoke_all_for_user(self, user_id: UUID) -> None:
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.is_revoked.is_(False))
            .values(is_revoked=True)
            .execution_options(synchronize_session="fetch")
        )
        await self.execute(stmt)

    async def delete_expired_or_revoked(self, user_id: UUID, now: datetime, keep_id: UUID) -> None:
        """Delete the user's expired or revoked tokens, keeping ``keep_id`` for reuse detection."""
        stmt = delete(RefreshToken).where(
            RefreshToken.user_id == user_id,
            RefreshToken.id != keep_id,
            (RefreshToken.expires_at <= now) | RefreshToken.is_revoked.is_(True),
        ).execution_options(synchronize_session="fetch")
        await self.execute(stmt)

    async def delete_all_except(self, user_id: UUID, keep_id: Optional[UUID]) -> None:
        stmt = delete(RefreshToken).where(RefreshToken.user_id == user_id)
        if keep_id is not None:
            stmt = stmt.where(RefreshToken.id != keep_id)
        stmt = stmt.execution_options(synchronize_session="fetch")
        await self.execute(stmt)
