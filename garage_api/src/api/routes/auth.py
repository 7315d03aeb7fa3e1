from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.results import unwrap
from src.core.deps import CurrentUser, get_client_info, get_current_user
from src.db.session import get_async_session
from src.schemas.auth import (
    ChangePasswordRequest,
    LoginRequest,
    LogoutRequest,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
)
from src.schemas.users import UserRead
from src.services.auth import AuthService, ClientInfo, IssuedTokens

router = APIRouter(prefix="/auth", tags=["Auth"])


def _tokens_to_read(tokens: IssuedTokens) -> TokenPair:
    return TokenPair(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        refresh_token_expires_at=tokens.refresh_token_expires_at,
    )


# PUBLIC_INTERFACE
@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register user",
    description="Create a new account. Emails are unique (case-insensitive); passwords need 8+ characters.",
)
async def register_user(
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    """Register a new user."""
    user = unwrap(
        await AuthService(session).register(
            payload.email, payload.password, payload.first_name, payload.last_name
        )
    )
    return UserRead.model_validate(user)


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=TokenPair,
    summary="Login",
    description="Authenticate with email and password; opens a session and returns access/refresh tokens.",
)
async def login_for_tokens(
    payload: LoginRequest,
    client: ClientInfo = Depends(get_client_info),
    session: AsyncSession = Depends(get_async_session),
) -> TokenPair:
    """Authenticate user and issue tokens."""
    tokens = unwrap(
        await AuthService(session).login(payload.email, payload.password, payload.remember_me, client)
    )
    return _tokens_to_read(tokens)


# PUBLIC_INTERFACE
@router.post(
    "/refresh",
    response_model=TokenPair,
    summary="Refresh tokens",
    description="Rotate a refresh token. Reusing an already rotated token revokes every session of the user.",
)
async def refresh_tokens(
    payload: RefreshRequest,
    client: ClientInfo = Depends(get_client_info),
    session: AsyncSession = Depends(get_async_session),
) -> TokenPair:
    """Validate the refresh token and issue a new token pair."""
    return _tokens_to_read(unwrap(await AuthService(session).refresh(payload.refresh_token, client)))


# PUBLIC_INTERFACE
@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Logout",
    description="End the session of the given refresh token. Unknown tokens are ignored.",
)
async def logout(
    payload: LogoutRequest,
    session: AsyncSession = Depends(get_async_session),
) -> Response:
    await AuthService(session).logout(payload.refresh_token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# PUBLIC_INTERFACE
@router.post(
    "/change-password",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Change password",
    description="Change the current user's password, optionally ending every other session.",
)
async def change_password(
    payload: ChangePasswordRequest,
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> Response:
    unwrap(
        await AuthService(session).change_password(
            current.user,
            payload.current_password,
            payload.new_password,
            logout_all_devices=payload.logout_all_devices,
            session_id=current.session_id,
        )
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
