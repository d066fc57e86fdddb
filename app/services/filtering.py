"""Build SQLAlchemy filter/order clauses from table-view filter requests and paginate queries."""

import math
from collections.abc import Mapping, Sequence
from datetime import UTC, date, datetime, timedelta
from typing import Any

from sqlalchemy import Boolean, Date, String, and_, cast, not_, or_
from sqlalchemy.orm import Query
from sqlalchemy.sql.elements import ColumnElement

from app.core.exceptions import BadRequestError
from app.schemas.pagination import ColumnFilter, PaginationMeta, PaginationRequest, SortItem

DATE_VARIANTS = ("date", "dateRange")
NUMBER_VARIANTS = ("number", "range")

# isRelativeToToday units → (days per unit, days covered by the window).
RELATIVE_UNITS = {
    "days": (1, 1),
    "weeks": (7, 7),
    "months": (30, 30),
}

ColumnMap = Mapping[str, Any]


def _resolve_column(columns: ColumnMap, column_id: str) -> Any:
    try:
        return columns[column_id]
    except KeyError:
        raise BadRequestError(f"Unknown column: {column_id}") from None


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _end_of_day(moment: datetime) -> datetime:
    return _start_of_day(moment) + timedelta(days=1) - timedelta(microseconds=1)


def _from_epoch_ms(value: Any) -> datetime | None:
    """Filter dates arrive as epoch milliseconds (number or numeric string); UTC."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return datetime.fromtimestamp(float(value) / 1000, tz=UTC)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def _as_column_value(column: Any, moment: datetime) -> datetime | date:
    """Date columns compare against a date; timestamp columns against the datetime."""
    if isinstance(column.type, Date):
        return moment.date()
    return moment


def _to_number(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return float(value)
        except ValueError:
            return None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return None


def _boolean_value(column: Any, value: Any) -> Any:
    if isinstance(column.type, Boolean) and isinstance(value, str):
        return value.strip().lower() == "true"
    return value


def _is_empty(column: Any) -> ColumnElement:
    return or_(column.is_(None), cast(column, String) == "")


def _day_range(column: Any, value: Any) -> tuple[Any, Any] | None:
    moment = _from_epoch_ms(value)
    if moment is None:
        return None
    return (
        _as_column_value(column, _start_of_day(moment)),
        _as_column_value(column, _end_of_day(moment)),
    )


def _comparison(column: Any, f: ColumnFilter) -> ColumnElement | None:
    """
    lt/lte/gt/gte: numbers directly. Timestamps compare against the start (gt/gte)
    or end (lt/lte) of the given day; Date columns against the day itself.
    """
    if f.variant in NUMBER_VARIANTS:
        bound: Any = f.value
    elif f.variant == "date" and isinstance(f.value, str):
        moment = _from_epoch_ms(f.value)
        if moment is None:
            return None
        if isinstance(column.type, Date):
            bound = moment.date()
        elif f.operator in ("gt", "gte"):
            bound = _start_of_day(moment)
        else:
            bound = _end_of_day(moment)
    else:
        return None
    if f.operator == "lt":
        return column < bound
    if f.operator == "lte":
        return column <= bound
    if f.operator == "gt":
        return column > bound
    return column >= bound


def _between(column: Any, f: ColumnFilter) -> ColumnElement | None:
    if not isinstance(f.value, (list, tuple)) or len(f.value) != 2:
        return None
    if f.variant in DATE_VARIANTS:
        parts = []
        start = _from_epoch_ms(f.value[0])
        end = _from_epoch_ms(f.value[1])
        if start is not None:
            parts.append(column >= _as_column_value(column, _start_of_day(start)))
        if end is not None:
            parts.append(column <= _as_column_value(column, _end_of_day(end)))
        return and_(*parts) if parts else None
    if f.variant in NUMBER_VARIANTS:
        low, high = _to_number(f.value[0]), _to_number(f.value[1])
        if low is None and high is None:
            return None
        if high is None:
            return column == low
        if low is None:
            return column == high
        return and_(column >= low, column <= high)
    return None


def _relative_to_today(column: Any, f: ColumnFilter) -> ColumnElement | None:
    """Value like "-7 days" or "2 weeks": a window starting that far from today."""
    if f.variant not in DATE_VARIANTS or not isinstance(f.value, str):
        return None
    parts = f.value.split()
    if len(parts) != 2 or parts[1] not in RELATIVE_UNITS:
        return None
    try:
        amount = int(parts[0])
    except ValueError:
        return None
    unit_days, window_days = RELATIVE_UNITS[parts[1]]
    start = _start_of_day(datetime.now(UTC) + timedelta(days=amount * unit_days))
    end = _end_of_day(start + timedelta(days=window_days - 1))
    return and_(
        column >= _as_column_value(column, start),
        column <= _as_column_value(column, end),
    )


def build_condition(column: Any, f: ColumnFilter) -> ColumnElement | None:
    """Translate one filter; None when the operator does not apply to the variant/value."""
    op = f.operator
    if op == "iLike":
        if f.variant == "text" and isinstance(f.value, str):
            return column.ilike(f"%{f.value}%")
        return None
    if op == "notILike":
        if f.variant == "text" and isinstance(f.value, str):
            return column.not_ilike(f"%{f.value}%")
        return None
    if op in ("eq", "ne"):
        if f.variant in DATE_VARIANTS:
            day = _day_range(column, f.value)
            if day is None:
                return None
            start, end = day
            if op == "eq":
                return and_(column >= start, column <= end)
            return or_(column < start, column > end)
        value = _boolean_value(column, f.value)
        return column == value if op == "eq" else column != value
    if op == "inArray":
        return column.in_(f.value) if isinstance(f.value, list) else None
    if op == "notInArray":
        return column.not_in(f.value) if isinstance(f.value, list) else None
    if op in ("lt", "lte", "gt", "gte"):
        return _comparison(column, f)
    if op == "isBetween":
        return _between(column, f)
    if op == "isRelativeToToday":
        return _relative_to_today(column, f)
    if op == "isEmpty":
        return _is_empty(column)
    if op == "isNotEmpty":
        return not_(_is_empty(column))
    raise BadRequestError(f"Unsupported operator: {op}")


def filter_columns(
    columns: ColumnMap,
    filters: Sequence[ColumnFilter],
    join_operator: str = "and",
) -> ColumnElement | None:
    """Combine all applicable filters with AND/OR; None when nothing applies."""
    conditions = []
    for f in filters:
        condition = build_condition(_resolve_column(columns, f.id), f)
        if condition is not None:
            conditions.append(condition)
    if not conditions:
        return None
    return and_(*conditions) if join_operator == "and" else or_(*conditions)


def generate_order_by(
    columns: ColumnMap,
    sort: Sequence[SortItem],
    default_column: Any,
    default_desc: bool = True,
) -> list[ColumnElement]:
    if not sort:
        return [default_column.desc() if default_desc else default_column.asc()]
    clauses = []
    for item in sort:
        column = _resolve_column(columns, item.id)
        clauses.append(column.desc() if item.desc else column.asc())
    return clauses


def paginate(
    query: Query,
    request: PaginationRequest,
    columns: ColumnMap,
    default_sort_column: Any,
) -> tuple[list[Any], PaginationMeta]:
    """Apply filters, count, order and slice; return (rows, meta)."""
    condition = filter_columns(columns, request.filters, request.join_operator)
    if condition is not None:
        query = query.filter(condition)
    total_rows = query.order_by(None).count()
    rows = (
        query.order_by(*generate_order_by(columns, request.sort, default_sort_column))
        .offset((request.page - 1) * request.per_page)
        .limit(request.per_page)
        .all()
    )
    meta = PaginationMeta(
        page=request.page,
        per_page=request.per_page,
        total_rows=total_rows,
        total_page=math.ceil(total_rows / request.per_page),
    )
    return rows, meta
