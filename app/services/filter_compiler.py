from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, Mapping

from sqlalchemy import JSON, Boolean, Date, DateTime, Float, Integer, Numeric, and_, not_
from sqlalchemy import inspect as sa_inspect

from app.core.errors import InvalidFilterValue
from app.schemas.listing import FilterClause

_LOG = logging.getLogger("app.listing")

KIND_STRING = "string"
KIND_INTEGER = "integer"
KIND_FLOAT = "float"
KIND_DECIMAL = "decimal"
KIND_BOOLEAN = "boolean"
KIND_DATE = "date"
KIND_DATETIME = "datetime"
KIND_UUID = "uuid"

# Signed 64-bit range shared by the supported databases.
INTEGER_MIN = -(2**63)
INTEGER_MAX = 2**63 - 1
DECIMAL_MAX_EXPONENT = 37

FIELD_KINDS = {
    KIND_STRING,
    KIND_INTEGER,
    KIND_FLOAT,
    KIND_DECIMAL,
    KIND_BOOLEAN,
    KIND_DATE,
    KIND_DATETIME,
    KIND_UUID,
}


@dataclass(frozen=True)
class CompiledFilter:
    predicates: tuple[Any, ...]
    clauses: tuple[FilterClause, ...]
    warnings: tuple[str, ...] = ()

    def as_expression(self):
        return and_(*self.predicates) if self.predicates else None

    def describe(self) -> str:
        if not self.clauses:
            return "<none>"
        return ", ".join(f"{c.field}[{c.op}]" for c in self.clauses)


def column_kind(column: Any) -> str | None:
    col_type = column.type
    if isinstance(col_type, JSON):
        return None
    if isinstance(col_type, Boolean):
        return KIND_BOOLEAN
    if isinstance(col_type, Integer):
        return KIND_INTEGER
    if isinstance(col_type, Float):
        return KIND_FLOAT
    if isinstance(col_type, Numeric):
        return KIND_DECIMAL
    if isinstance(col_type, DateTime):
        return KIND_DATETIME
    if isinstance(col_type, Date):
        return KIND_DATE
    try:
        python_type = col_type.python_type
    except NotImplementedError:
        return KIND_STRING
    if python_type is uuid.UUID:
        return KIND_UUID
    return KIND_STRING


def field_kinds_for_model(model: type, exclude: Iterable[str] = ()) -> dict[str, str]:
    hidden = set(exclude)
    kinds: dict[str, str] = {}
    for column in sa_inspect(model).columns:
        if column.key in hidden:
            continue
        kind = column_kind(column)
        if kind is not None:
            kinds[column.key] = kind
    return kinds


def _coerce_bool(field: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value or "").strip().lower()
    if text in {"1", "true", "yes", "y"}:
        return True
    if text in {"0", "false", "no", "n"}:
        return False
    raise InvalidFilterValue(field, KIND_BOOLEAN)


def _coerce_number(field: str, value: Any, kind: str):
    text = str(value if value is not None else "").strip()
    if not text:
        raise InvalidFilterValue(field, kind)
    normalized = text.replace(",", ".")
    try:
        if kind == KIND_INTEGER:
            number = int(normalized)
            if not INTEGER_MIN <= number <= INTEGER_MAX:
                raise InvalidFilterValue(field, kind)
            return number
        if kind == KIND_FLOAT:
            number = float(normalized)
            if not math.isfinite(number):
                raise InvalidFilterValue(field, kind)
            return number
        number = Decimal(normalized)
        if not number.is_finite() or number.adjusted() > DECIMAL_MAX_EXPONENT:
            raise InvalidFilterValue(field, kind)
        return number
    except (ValueError, InvalidOperation):
        raise InvalidFilterValue(field, kind)


def _coerce_date(field: str, value: Any) -> date:
    text = str(value or "").strip()
    if not text:
        raise InvalidFilterValue(field, KIND_DATE)
    try:
        # Full ISO datetimes are accepted; only their date part is used.
        if "T" in text or " " in text:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return date.fromisoformat(text)
    except ValueError:
        raise InvalidFilterValue(field, KIND_DATE)


def _coerce_datetime(field: str, value: Any) -> datetime:
    text = str(value or "").strip()
    if not text:
        raise InvalidFilterValue(field, KIND_DATETIME)
    try:
        if _is_date_only_literal(text):
            parsed = datetime.combine(date.fromisoformat(text), datetime.min.time())
        else:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except (ValueError, OverflowError):
        raise InvalidFilterValue(field, KIND_DATETIME)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _coerce_uuid(field: str, value: Any) -> uuid.UUID:
    try:
        return uuid.UUID(str(value or "").strip())
    except ValueError:
        raise InvalidFilterValue(field, KIND_UUID)


def coerce_value(field: str, kind: str, value: Any) -> Any:
    if kind == KIND_BOOLEAN:
        return _coerce_bool(field, value)
    if kind in {KIND_INTEGER, KIND_FLOAT, KIND_DECIMAL}:
        return _coerce_number(field, value, kind)
    if kind == KIND_DATE:
        return _coerce_date(field, value)
    if kind == KIND_DATETIME:
        return _coerce_datetime(field, value)
    if kind == KIND_UUID:
        return _coerce_uuid(field, value)
    return str(value)


def _is_date_only_literal(text: str) -> bool:
    if not text or "T" in text or " " in text:
        return False
    try:
        date.fromisoformat(text)
        return True
    except ValueError:
        return False


def _compile_clause(column: Any, kind: str, clause: FilterClause):
    if clause.op == "in":
        raw_items = clause.value.split(",") if isinstance(clause.value, str) else clause.value
        values = [coerce_value(clause.field, kind, str(item).strip()) for item in raw_items if str(item).strip()]
        return column.in_(values)

    value = coerce_value(clause.field, kind, clause.value)
    if kind == KIND_DATETIME and clause.op in {"eq", "ne"} and _is_date_only_literal(str(clause.value).strip()):
        if value.date() == date.max:
            day_expr = column >= value
        else:
            day_expr = and_(column >= value, column < value + timedelta(days=1))
        return day_expr if clause.op == "eq" else not_(day_expr)
    if clause.op == "eq":
        return column == value
    if clause.op == "ne":
        return column != value
    if clause.op == "gt":
        return column > value
    if clause.op == "gte":
        return column >= value
    if clause.op == "lt":
        return column < value
    return column <= value


def compile_filters(model: type, clauses: Iterable[FilterClause], field_kinds: Mapping[str, str]) -> CompiledFilter:
    predicates = []
    applied: list[FilterClause] = []
    warnings: list[str] = []
    for clause in clauses:
        kind = field_kinds.get(clause.field)
        column = getattr(model, clause.field, None) if kind is not None else None
        if column is None:
            warnings.append(f'ignored filter on unknown field "{clause.field}"')
            continue
        if kind not in FIELD_KINDS:
            raise ValueError(f'unknown field kind "{kind}" for {model.__name__}.{clause.field}')
        predicates.append(_compile_clause(column, kind, clause))
        applied.append(clause)
    for warning in warnings:
        _LOG.debug("listing: %s on %s", warning, model.__name__)
    return CompiledFilter(predicates=tuple(predicates), clauses=tuple(applied), warnings=tuple(warnings))
