from __future__ import annotations

from typing import Any

from sqlalchemy import Executable
from sqlalchemy.engine import Result, ScalarResult
from sqlalchemy.ext.asyncio import AsyncSession


class BaseRepository:
    """
    Shared helpers for the per-aggregate repositories.

    Repositories build and run select statements and stage changes; they never
    commit on their own, the calling service owns the unit of work.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def execute(self, statement: Executable) -> Result:
        return await self.session.execute(statement)

    async def scalars(self, statement: Executable) -> ScalarResult:
        return await self.session.scalars(statement)

    async def scalar_one_or_none(self, statement: Executable) -> Any:
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def add(self, entity: Any) -> None:
        self.session.add(entity)

    async def delete(self, entity: Any) -> None:
        await self.session.delete(entity)

    async def commit(self) -> None:
        await self.session.commit()
