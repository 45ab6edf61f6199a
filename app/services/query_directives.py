from __future__ import annotations

import logging
import re
from typing import Any, Iterable, Iterator, Mapping

from app.core.errors import InvalidPagination, InvalidProjection, UnsupportedOperator
from app.schemas.listing import OPERATORS, RESERVED_KEYS, FilterClause, Projection, QueryDirectives, SortClause

_LOG = logging.getLogger("app.listing")
_PARAM_RE = re.compile(r"^(?P<name>[^\[\]]+)(?:\[(?P<op>[^\[\]]*)\])?$")
_POSITIVE_INT_RE = re.compile(r"^\d+$")
# Largest OFFSET a signed 64-bit database integer can hold.
MAX_OFFSET = 2**63 - 1


def _iter_params(params: Any) -> Iterator[tuple[str, str]]:
    # starlette QueryParams keeps repeated keys only through multi_items()
    if hasattr(params, "multi_items"):
        for key, value in params.multi_items():
            yield str(key), str(value)
        return
    items: Iterable = params.items() if isinstance(params, Mapping) else params
    for key, value in items:
        if isinstance(value, (list, tuple)):
            for item in value:
                yield str(key), str(item)
        elif value is None:
            yield str(key), ""
        else:
            yield str(key), str(value)


def _base_name(key: str) -> str:
    return key.split("[", 1)[0].strip()


def _positive_int(param: str, raw: str) -> int:
    text = str(raw or "").strip()
    if not _POSITIVE_INT_RE.fullmatch(text):
        raise InvalidPagination(param, raw)
    # Anything past 19 digits is out of range for an offset or limit anyway.
    value = int(text) if len(text.lstrip("0")) <= 19 else MAX_OFFSET + 1
    if value < 1:
        raise InvalidPagination(param, raw)
    return value


def _split_csv(raw_values: list[str]) -> list[str]:
    tokens: list[str] = []
    for raw in raw_values:
        for token in str(raw).split(","):
            token = token.strip()
            if token:
                tokens.append(token)
    return tokens


def parse_sort(raw_values: list[str]) -> tuple[SortClause, ...]:
    clauses: list[SortClause] = []
    seen: set[str] = set()
    for token in _split_csv(raw_values):
        descending = token.startswith("-")
        field = (token[1:] if descending else token).strip()
        if not field or field in seen:
            continue
        seen.add(field)
        clauses.append(SortClause(field=field, dir="desc" if descending else "asc"))
    return tuple(clauses)


def parse_fields(raw_values: list[str]) -> Projection:
    tokens = _split_csv(raw_values)
    if not tokens:
        return Projection()
    excluded = [token for token in tokens if token.startswith("-")]
    if excluded and len(excluded) != len(tokens):
        raise InvalidProjection()
    names: list[str] = []
    for token in tokens:
        name = (token[1:] if token.startswith("-") else token).strip()
        if name and name not in names:
            names.append(name)
    return Projection(fields=tuple(names), exclude=bool(excluded))


def _filter_clause(key: str, raw: str) -> FilterClause:
    match = _PARAM_RE.fullmatch(key)
    if match is None:
        raise UnsupportedOperator(key, key[len(_base_name(key)):])
    op = match.group("op")
    if op is None:
        op = "eq"
    elif op not in OPERATORS:
        raise UnsupportedOperator(key, op)
    field = match.group("name").strip()
    if op == "in":
        return FilterClause(field=field, op=op, value=tuple(_split_csv([raw])))
    return FilterClause(field=field, op=op, value=raw)


def parse_query_directives(params: Any, *, default_page_size: int, max_page_size: int) -> QueryDirectives:
    filters: list[FilterClause] = []
    sort_values: list[str] = []
    fields_values: list[str] = []
    page_raw: str | None = None
    limit_raw: str | None = None

    for key, raw in _iter_params(params):
        base = _base_name(key)
        if not base:
            _LOG.debug("listing: dropped parameter without a field name: %r", key)
            continue
        if base in RESERVED_KEYS:
            if base == "page":
                page_raw = raw
            elif base == "limit":
                limit_raw = raw
            elif base == "sort":
                sort_values.append(raw)
            else:
                fields_values.append(raw)
            if base != key:
                _LOG.debug("listing: reserved key %r consumed as control input", key)
            continue
        filters.append(_filter_clause(key, raw))

    page = _positive_int("page", page_raw) if page_raw is not None else 1
    if limit_raw is not None:
        page_size = min(_positive_int("limit", limit_raw), max_page_size)
    else:
        page_size = min(default_page_size, max_page_size)
    if (page - 1) * page_size > MAX_OFFSET:
        raise InvalidPagination("page", page_raw or "")

    return QueryDirectives(
        filters=tuple(filters),
        sort=parse_sort(sort_values),
        projection=parse_fields(fields_values),
        page=page,
        page_size=page_size,
    )
