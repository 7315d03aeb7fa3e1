from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.result import Error, Result

logger = logging.getLogger(__name__)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from backends without tz support."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


class BaseService:
    """
    Base class for services. Holds a session for use across multiple repositories.

    Services keep business logic and orchestration, delegate data access to
    repositories, own the commit, and report expected failures as Result values.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def utcnow() -> datetime:
        return datetime.now(tz=timezone.utc)

    async def commit_or(self, error: Error) -> Result[None]:
        """Commit the unit of work; on a database error roll back and return ``error``."""
        try:
            await self.session.commit()
        except SQLAlchemyError:
            logger.exception("Commit failed (%s)", error.code)
            await self.session.rollback()
            return Result.failure(error)
        return Result.success()
