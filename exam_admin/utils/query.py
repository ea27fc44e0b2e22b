from __future__ import annotations

import json
from typing import Any, Iterable, List, Optional

from sqlalchemy import Select, String, cast, or_, type_coerce
from sqlalchemy.dialects.postgresql import JSONB

from exam_admin.utils.field_mapper import FieldSpec, sortable_columns
from exam_admin.utils.responses import ValidationError


def split_csv(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


def text_search(columns: Iterable[Any], term: str):
    """Case-insensitive substring match of term on any of the columns."""
    return or_(*(col.icontains(term, autoescape=True) for col in columns))


def json_array_contains(column: Any, value: Any, dialect: str):
    """
    column (a JSON array) contains value.
    PostgreSQL uses JSONB @>; other backends match the serialized element,
    which is how the default JSON serializer writes it.
    """
    if dialect == "postgresql":
        return type_coerce(column, JSONB).contains([value])
    return cast(column, String).contains(json.dumps(value), autoescape=True)


def apply_contains_all(stmt: Select, column: Any, values: Iterable[Any], dialect: str) -> Select:
    # one condition per value -> every value must be present
    for value in values:
        stmt = stmt.where(json_array_contains(column, value, dialect))
    return stmt


def apply_sort(stmt: Select, model: Any, fields: Iterable[FieldSpec],
               sort_by: Optional[str], sort_order: Optional[str]) -> Select:
    """Orders by the requested wire field, createdAt descending by default."""
    order = (sort_order or "desc").lower()
    if order not in ("asc", "desc"):
        raise ValidationError(errors=["sortOrder must be 'asc' or 'desc'"])

    columns = sortable_columns(fields)
    wire = sort_by or "createdAt"
    if wire not in columns:
        raise ValidationError(errors=[f"sortBy must be one of {sorted(columns)}"])

    column = getattr(model, columns[wire])
    stmt = stmt.order_by(column.asc() if order == "asc" else column.desc())
    if wire != "id":
        # stable paging when the sort key has ties
        stmt = stmt.order_by(model.id.asc() if order == "asc" else model.id.desc())
    return stmt
