from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, Optional
from uuid import UUID

from sqlalchemy import Select, func, or_

from src.db.models.maintenance import ServiceRecord

SORT_SERVICE_DATE = "servicedate"
SORT_TOTAL_COST = "totalcost"
SORT_MILEAGE = "mileage"
SORT_TITLE = "title"

SORTABLE_FIELDS = (SORT_SERVICE_DATE, SORT_TOTAL_COST, SORT_MILEAGE, SORT_TITLE)

_SORT_COLUMNS: Dict[str, Callable[[], object]] = {
    SORT_SERVICE_DATE: lambda: ServiceRecord.service_date,
    SORT_MILEAGE: lambda: ServiceRecord.mileage,
    SORT_TITLE: lambda: func.lower(ServiceRecord.title),
}


def _normalize(sort_by: Optional[str]) -> str:
    return (sort_by or "").strip().lower()


class ServiceRecordFilterService:
    """
    Filters and ordering for ``select(ServiceRecord)`` statements.

    ``totalcost`` is derived from the items, so it cannot be ordered in SQL:
    ``apply_sorting`` falls back to the default order for it and callers check
    ``requires_in_memory_sorting`` to sort the materialised rows themselves.
    """

    # PUBLIC_INTERFACE
    @staticmethod
    def apply_filters(
        stmt: Select,
        search_term: Optional[str] = None,
        service_type_id: Optional[UUID] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> Select:
        if search_term and search_term.strip():
            term = search_term.strip()
            stmt = stmt.where(
                or_(
                    ServiceRecord.title.icontains(term, autoescape=True),
                    ServiceRecord.notes.icontains(term, autoescape=True),
                )
            )
        if service_type_id is not None:
            stmt = stmt.where(ServiceRecord.type_id == service_type_id)
        if date_from is not None:
            stmt = stmt.where(ServiceRecord.service_date >= date_from)
        if date_to is not None:
            stmt = stmt.where(ServiceRecord.service_date <= date_to)
        return stmt

    # PUBLIC_INTERFACE
    @staticmethod
    def apply_sorting(stmt: Select, sort_by: Optional[str], descending: bool = True) -> Select:
        column_factory = _SORT_COLUMNS.get(_normalize(sort_by))
        if column_factory is None:
            return ServiceRecordFilterService.apply_default_sorting(stmt)
        column = column_factory()
        ordered = column.desc() if descending else column.asc()  # type: ignore[attr-defined]
        return stmt.order_by(ordered, ServiceRecord.id)

    # PUBLIC_INTERFACE
    @staticmethod
    def apply_default_sorting(stmt: Select) -> Select:
        return stmt.order_by(ServiceRecord.service_date.desc(), ServiceRecord.id)

    # PUBLIC_INTERFACE
    @staticmethod
    def requires_in_memory_sorting(sort_by: Optional[str]) -> bool:
        return _normalize(sort_by) == SORT_TOTAL_COST
