"""Pagination, filter and sort request schemas plus the paginated response shape."""

from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel, Field

from app.schemas.common import CamelModel

T = TypeVar("T")

JoinOperator = Literal["and", "or"]

FilterVariant = Literal[
    "text",
    "number",
    "date",
    "dateRange",
    "boolean",
    "range",
    "select",
    "multiSelect",
    "enum",
]

FilterOperator = Literal[
    "eq",
    "ne",
    "gt",
    "gte",
    "lt",
    "lte",
    "iLike",
    "notILike",
    "inArray",
    "notInArray",
    "isBetween",
    "isRelativeToToday",
    "isEmpty",
    "isNotEmpty",
]

# Export pulls everything through the list query in one page.
MAX_PER_PAGE = 100_000


class ColumnFilter(CamelModel):
    """One filter on a column; id may name a joined column as "table.column"."""

    id: str = Field(..., min_length=1)
    value: Any = None
    operator: FilterOperator
    variant: FilterVariant
    filter_id: str | None = None


class SortItem(BaseModel):
    id: str = Field(..., min_length=1)
    desc: bool = False


class PaginationRequest(CamelModel):
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=10, ge=1, le=MAX_PER_PAGE)
    filters: list[ColumnFilter] = []
    join_operator: JoinOperator = "and"
    sort: list[SortItem] = []


class PaginationMeta(CamelModel):
    page: int
    per_page: int
    total_rows: int
    total_page: int


class Page(BaseModel, Generic[T]):
    rows: list[T]
    meta: PaginationMeta
