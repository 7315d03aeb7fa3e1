from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import UserErrors
from src.core.result import Result
from src.db.models.security import RefreshToken, User
from src.repositories.security import RefreshTokenRepository, UserRepository
from src.services.base import BaseService

logger = logging.getLogger(__name__)


class UserService(BaseService):
    """Profile and session management for the calling user."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.users = UserRepository(session)
        self.tokens = RefreshTokenRepository(session)

    # PUBLIC_INTERFACE
    async def get(self, user_id: UUID) -> Result[User]:
        user = await self.users.get_user_by_id(user_id)
        if user is None:
            return Result.failure(UserErrors.NotFound)
        return Result.success(user)

    # PUBLIC_INTERFACE
    async def update_profile(self, user: User, first_name: str, last_name: str) -> Result[User]:
        user.first_name = first_name.strip()
        user.last_name = last_name.strip()
        await self.users.commit()
        return Result.success(user)

    # PUBLIC_INTERFACE
    async def delete(self, user: User) -> Result[None]:
        """Delete the account; vehicles, history and sessions go with it."""
        await self.users.delete(user)
        await self.users.commit()
        logger.info("Deleted user %s", user.id)
        return Result.success()

    # PUBLIC_INTERFACE
    async def list_sessions(self, user_id: UUID) -> List[RefreshToken]:
        return await self.tokens.list_active_for_user(user_id, self.utcnow())

    # PUBLIC_INTERFACE
    async def delete_session(
        self, user_id: UUID, session_id: UUID, current_session_id: Optional[UUID]
    ) -> Result[None]:
        if current_session_id is not None and session_id == current_session_id:
            return Result.failure(UserErrors.DeleteCurrentSession)
        token = await self.tokens.get_for_user(session_id, user_id)
        if token is None:
            return Result.failure(UserErrors.SessionNotFound)
        await self.tokens.delete(token)
        await self.tokens.commit()
        logger.info("User %s ended session %s", user_id, session_id)
        return Result.success()

    # PUBLIC_INTERFACE
    async def delete_other_sessions(self, user_id: UUID, current_session_id: Optional[UUID]) -> Result[None]:
        await self.tokens.delete_all_except(user_id, keep_id=current_session_id)
        await self.tokens.commit()
        logger.info("User %s ended all other sessions", user_id)
        return Result.success()
