from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import AuthErrors, UserErrors
from src.core.result import Result
from src.core.security import (
    create_access_token,
    generate_refresh_token,
    get_password_hash,
    verify_password,
)
from src.core.settings import get_app_settings
from src.db.models.security import RefreshToken, User
from src.repositories.security import RefreshTokenRepository, UserRepository
from src.services.base import BaseService, as_utc
from src.services.user_agent import parse_device_name

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


@dataclass
class ClientInfo:
    """Where a login or refresh request came from."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass
class IssuedTokens:
    access_token: str
    refresh_token: str
    refresh_token_expires_at: datetime


# PUBLIC_INTERFACE
def validate_new_password(password: str) -> Result[None]:
    if len(password or "") < MIN_PASSWORD_LENGTH:
        return Result.failure(UserErrors.PasswordTooShort(MIN_PASSWORD_LENGTH))
    return Result.success()


class AuthService(BaseService):
    """
    Registration, password login and refresh-token rotation.

    Each login creates one RefreshToken row, which is the user's session on
    that device. Access tokens carry the session id in the ``sid`` claim.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.users = UserRepository(session)
        self.tokens = RefreshTokenRepository(session)
        self.settings = get_app_settings()

    # PUBLIC_INTERFACE
    async def register(self, email: str, password: str, first_name: str, last_name: str) -> Result[User]:
        email = email.strip().lower()
        check = validate_new_password(password)
        if check.is_failure:
            return Result.failure(check.error)
        if await self.users.email_exists(email):
            return Result.failure(UserErrors.EmailNotUnique)

        user = await self.users.create_user(
            email=email,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            password_hash=get_password_hash(password),
        )
        await self.users.commit()
        logger.info("Registered user %s", user.id)
        return Result.success(user)

    # PUBLIC_INTERFACE
    async def login(
        self, email: str, password: str, remember_me: bool = False, client: Optional[ClientInfo] = None
    ) -> Result[IssuedTokens]:
        user = await self.users.get_user_by_email(email.strip().lower())
        if user is None or not verify_password(password, user.password_hash):
            logger.info("Failed login attempt for %s", email)
            return Result.failure(AuthErrors.CredentialsInvalid)

        days = self.settings.session_duration_days(remember_me)
        token = self._new_session(user.id, days, client or ClientInfo())
        await self.tokens.add(token)
        await self.tokens.commit()
        logger.info("User %s logged in from %s", user.id, token.device_name)
        return Result.success(self._issue(user.id, token))

    # PUBLIC_INTERFACE
    async def refresh(self, refresh_token: str, client: Optional[ClientInfo] = None) -> Result[IssuedTokens]:
        """Rotate a refresh token; reuse of a rotated token revokes all of the user's sessions."""
        current = await self.tokens.get_by_token(refresh_token)
        if current is None:
            return Result.failure(AuthErrors.TokenInvalid)

        if current.is_revoked:
            logger.warning(
                "Revoked refresh token reused for user %s; revoking all sessions", current.user_id
            )
            await self.tokens.revoke_all_for_user(current.user_id)
            await self.tokens.commit()
            return Result.failure(AuthErrors.TokenRevoked)

        now = self.utcnow()
        if as_utc(current.expires_at) <= now:  # type: ignore[operator]
            current.is_revoked = True
            await self.tokens.commit()
            return Result.failure(AuthErrors.TokenExpired)

        replacement = self._new_session(current.user_id, current.session_duration_days, client or ClientInfo())
        current.is_revoked = True
        current.replaced_by_token = replacement.token
        await self.tokens.add(replacement)
        await self.session.flush()
        await self.tokens.delete_expired_or_revoked(current.user_id, now, keep_id=current.id)
        await self.tokens.commit()
        return Result.success(self._issue(current.user_id, replacement))

    # PUBLIC_INTERFACE
    async def logout(self, refresh_token: str) -> None:
        token = await self.tokens.get_by_token(refresh_token)
        if token is None:
            return
        await self.tokens.delete(token)
        await self.tokens.commit()
        logger.info("Session %s of user %s ended", token.id, token.user_id)

    # PUBLIC_INTERFACE
    async def change_password(
        self,
        user: User,
        current_password: str,
        new_password: str,
        logout_all_devices: bool = False,
        session_id: Optional[UUID] = None,
    ) -> Result[None]:
        if not verify_password(current_password, user.password_hash):
            return Result.failure(AuthErrors.PasswordInvalid)
        check = validate_new_password(new_password)
        if check.is_failure:
            return check
        if current_password == new_password:
            return Result.failure(UserErrors.PasswordSameAsOld)

        user.password_hash = get_password_hash(new_password)
        if logout_all_devices:
            await self.tokens.delete_all_except(user.id, keep_id=session_id)
        await self.users.commit()
        logger.info("User %s changed password (other sessions ended: %s)", user.id, logout_all_devices)
        return Result.success()

    def _new_session(self, user_id: UUID, days: int, client: ClientInfo) -> RefreshToken:
        return RefreshToken(
            token=generate_refresh_token(),
            expires_at=self.utcnow() + timedelta(days=days),
            session_duration_days=days,
            is_revoked=False,
            ip_address=client.ip_address,
            user_agent=client.user_agent,
            device_name=parse_device_name(client.user_agent),
            user_id=user_id,
        )

    def _issue(self, user_id: UUID, token: RefreshToken) -> IssuedTokens:
        return IssuedTokens(
            access_token=create_access_token(subject=str(user_id), session_id=str(token.id)),
            refresh_token=token.token,
            refresh_token_expires_at=token.expires_at,
        )
