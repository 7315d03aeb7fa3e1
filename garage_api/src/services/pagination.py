"""Pagination envelope shared by every list endpoint."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, List, Sequence, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")
U = TypeVar("U")


@dataclass
class PagedList(Generic[T]):
    """One page of items plus the paging metadata clients need to navigate."""

    items: List[T]
    page: int
    page_size: int
    total_count: int

    @property
    def has_next_page(self) -> bool:
        return self.page * self.page_size < self.total_count

    @property
    def has_previous_page(self) -> bool:
        return self.page > 1

    # PUBLIC_INTERFACE
    @classmethod
    async def create(
        cls, session: AsyncSession, stmt: Select, page: int, page_size: int
    ) -> "PagedList":
        """Count ``stmt`` and fetch the requested page of ORM entities."""
        count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
        total_count = int((await session.execute(count_stmt)).scalar_one())
        page_stmt = stmt.offset((page - 1) * page_size).limit(page_size)
        items = list((await session.execute(page_stmt)).scalars().all())
        return cls(items=items, page=page, page_size=page_size, total_count=total_count)

    # PUBLIC_INTERFACE
    @classmethod
    def from_sequence(cls, items: Sequence[T], page: int, page_size: int) -> "PagedList[T]":
        """Slice an already materialised, already ordered sequence."""
        start = (page - 1) * page_size
        return cls(
            items=list(items[start:start + page_size]),
            page=page,
            page_size=page_size,
            total_count=len(items),
        )

    def map(self, mapper: Callable[[T], U]) -> "PagedList[U]":
        return PagedList(
            items=[mapper(item) for item in self.items],
            page=self.page,
            page_size=self.page_size,
            total_count=self.total_count,
        )
