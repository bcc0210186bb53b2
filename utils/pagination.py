# src/utils/pagination.py
import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.orm import Query

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass
class PaginationOptions:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    sort_by: str = "created_at"
    sort_order: str = "desc"

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def calculate_pagination(
    page: Optional[int] = None,
    limit: Optional[int] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
    sortable_fields: Iterable[str] = ("created_at",),
) -> PaginationOptions:
    """Normalise raw paging parameters, falling back to defaults for bad values."""
    sortable_fields = list(sortable_fields)
    page = page if page and page > 0 else DEFAULT_PAGE
    limit = min(limit, MAX_LIMIT) if limit and limit > 0 else DEFAULT_LIMIT
    if sort_by not in sortable_fields:
        sort_by = sortable_fields[0]
    sort_order = "asc" if (sort_order or "").lower() == "asc" else "desc"
    return PaginationOptions(page=page, limit=limit, sort_by=sort_by, sort_order=sort_order)


def pagination_params(sortable_fields: Iterable[str]):
    """Build a FastAPI dependency reading page/limit/sort_by/sort_order from the query string."""
    sortable_fields = list(sortable_fields)

    def dependency(
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> PaginationOptions:
        return calculate_pagination(page, limit, sort_by, sort_order, sortable_fields=sortable_fields)

    return dependency


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


def calculate_meta(page: int, limit: int, total: int) -> Dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "total_pages": math.ceil(total / limit) if limit else 0,
    }


def apply_search(query: Query, model, search_term: Optional[str], searchable_fields: List[str]) -> Query:
    """Case-insensitive substring match over any of the given columns."""
    if not search_term:
        return query
    pattern = f"%{search_term}%"
    return query.filter(or_(*[getattr(model, field).ilike(pattern) for field in searchable_fields]))


def apply_filters(query: Query, model, filters: Dict[str, Any]) -> Query:
    """Equality filters; empty values are ignored."""
    for field, value in filters.items():
        if value is None or value == "":
            continue
        query = query.filter(getattr(model, field) == value)
    return query


def paginate(query: Query, model, options: PaginationOptions) -> Dict[str, Any]:
    total = query.count()
    column = getattr(model, options.sort_by)
    order = column.asc() if options.sort_order == "asc" else column.desc()
    items = query.order_by(order).offset(options.skip).limit(options.limit).all()
    return {
        "meta": calculate_meta(options.page, options.limit, total),
        "data": items,
    }
