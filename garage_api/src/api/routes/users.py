from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.results import unwrap
from src.core.deps import CurrentUser, get_current_user
from src.db.session import get_async_session
from src.schemas.users import SessionRead, UserRead, UserUpdate
from src.services.users import UserService

router = APIRouter(prefix="/users", tags=["Users"])


# PUBLIC_INTERFACE
@router.get("/me", response_model=UserRead, summary="Read current user")
async def read_current_user(current: CurrentUser = Depends(get_current_user)) -> UserRead:
    """Return current user profile."""
    return UserRead.model_validate(current.user)


# PUBLIC_INTERFACE
@router.put("/me", response_model=UserRead, summary="Update current user")
async def update_current_user(
    payload: UserUpdate,
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    user = unwrap(await UserService(session).update_profile(current.user, payload.first_name, payload.last_name))
    return UserRead.model_validate(user)


# PUBLIC_INTERFACE
@router.delete(
    "/me",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete current user",
    description="Delete the account with its vehicles, history and sessions.",
)
async def delete_current_user(
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> Response:
    unwrap(await UserService(session).delete(current.user))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# PUBLIC_INTERFACE
@router.get(
    "/me/sessions",
    response_model=List[SessionRead],
    summary="List sessions",
    description="Active login sessions of the current user; the calling one is flagged is_current.",
)
async def list_sessions(
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> List[SessionRead]:
    tokens = await UserService(session).list_sessions(current.id)
    return [
        SessionRead.model_validate(token).model_copy(update={"is_current": token.id == current.session_id})
        for token in tokens
    ]


# PUBLIC_INTERFACE
@router.delete(
    "/me/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="End a session",
    description="End another session of the current user. The calling session cannot be ended here.",
)
async def delete_session(
    session_id: UUID = Path(...),
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> Response:
    unwrap(await UserService(session).delete_session(current.id, session_id, current.session_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# PUBLIC_INTERFACE
@router.delete(
    "/me/sessions",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="End all other sessions",
)
async def delete_other_sessions(
    current: CurrentUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_async_session),
) -> Response:
    unwrap(await UserService(session).delete_other_sessions(current.id, current.session_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
