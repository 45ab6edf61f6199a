from __future__ import annotations

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterable, Sequence

from sqlalchemy import asc, desc, func
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query

from app.core.errors import PersistenceFailure
from app.schemas.listing import Projection, SortClause
from app.services.filter_compiler import CompiledFilter, column_kind

_LOG = logging.getLogger("app.listing")
_TOTAL_LABEL = "_total_size"

CONSISTENCY_INDEPENDENT = "independent"
CONSISTENCY_SNAPSHOT = "snapshot"


def serialize_value(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: serialize_value(val) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_value(item) for item in value]
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    return value


def _primary_key(model: type) -> list[Any]:
    return [getattr(model, column.key) for column in sa_inspect(model).primary_key]


def resolve_ordering(
    model: type,
    sort: Sequence[SortClause],
    *,
    default_sort: Sequence[SortClause],
    hidden: Iterable[str] = (),
) -> list[Any]:
    blocked = set(hidden)
    # JSON columns have no ordering operator on PostgreSQL.
    columns = {column.key for column in sa_inspect(model).columns if column_kind(column) is not None} - blocked
    requested = [clause for clause in sort if clause.field in columns]
    if len(requested) != len(sort):
        _LOG.debug("listing: dropped unknown sort fields on %s", model.__name__)
    if not requested:
        requested = [clause for clause in default_sort if clause.field in columns]

    ordering = []
    used: set[str] = set()
    for clause in requested:
        col = getattr(model, clause.field)
        ordering.append(asc(col) if clause.dir == "asc" else desc(col))
        used.add(clause.field)
    # Primary key tie-breaker keeps page boundaries deterministic.
    for pk in _primary_key(model):
        if pk.key not in used:
            ordering.append(asc(pk))
    return ordering


def resolve_projection(model: type, projection: Projection, *, hidden: Iterable[str] = ()) -> list[Any]:
    blocked = set(hidden)
    pk_keys = {column.key for column in sa_inspect(model).primary_key}
    visible = [column.key for column in sa_inspect(model).columns if column.key not in blocked]
    if set(projection.fields) - set(visible):
        _LOG.debug("listing: dropped unknown projection fields on %s", model.__name__)
    if projection.is_default:
        names = visible
    elif projection.exclude:
        excluded = set(projection.fields) - pk_keys
        names = [name for name in visible if name not in excluded]
    else:
        wanted = set(projection.fields) | pk_keys
        names = [name for name in visible if name in wanted]
    return [getattr(model, name) for name in names]


def _filtered(base: Query, compiled: CompiledFilter) -> Query:
    expression = compiled.as_expression()
    return base if expression is None else base.filter(expression)


def _document(row: Any, columns: Sequence[Any]) -> dict[str, Any]:
    mapping = row._mapping
    return {col.key: serialize_value(mapping[col.key]) for col in columns}


def execute_page(
    base: Query,
    compiled: CompiledFilter,
    *,
    ordering: Sequence[Any],
    columns: Sequence[Any],
    offset: int,
    limit: int,
    resource: str,
) -> list[dict[str, Any]]:
    q = _filtered(base, compiled).with_entities(*columns).order_by(*ordering).offset(offset).limit(limit)
    try:
        rows = q.all()
    except (SQLAlchemyError, OverflowError) as exc:
        raise PersistenceFailure(resource, compiled.describe()) from exc
    return [_document(row, columns) for row in rows]


def count_matches(base: Query, compiled: CompiledFilter, *, resource: str) -> int:
    q = _filtered(base, compiled).order_by(None)
    try:
        return int(q.count())
    except (SQLAlchemyError, OverflowError) as exc:
        raise PersistenceFailure(resource, compiled.describe()) from exc


def execute_snapshot(
    base: Query,
    compiled: CompiledFilter,
    *,
    ordering: Sequence[Any],
    columns: Sequence[Any],
    offset: int,
    limit: int,
    resource: str,
) -> tuple[list[dict[str, Any]], int]:
    total_col = func.count().over().label(_TOTAL_LABEL)
    q = _filtered(base, compiled).with_entities(*columns, total_col).order_by(*ordering).offset(offset).limit(limit)
    try:
        rows = q.all()
    except (SQLAlchemyError, OverflowError) as exc:
        raise PersistenceFailure(resource, compiled.describe()) from exc
    if rows:
        return [_document(row, columns) for row in rows], int(rows[0]._mapping[_TOTAL_LABEL])
    if offset == 0:
        return [], 0
    # The window lies past the last match; an empty page cannot disagree with any count.
    return [], count_matches(base, compiled, resource=resource)


def row_to_document(row: Any, *, hidden: Iterable[str] = ()) -> dict[str, Any]:
    blocked = set(hidden)
    mapper = sa_inspect(type(row))
    return {column.key: serialize_value(getattr(row, column.key)) for column in mapper.columns if column.key not in blocked}
