from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from sqlalchemy.orm import Query

from app.core.config import settings
from app.schemas.listing import FailureEnvelope, QueryDirectives, SortClause
from app.services.filter_compiler import compile_filters, field_kinds_for_model
from app.services.query_directives import parse_query_directives
from app.services.query_executor import (
    CONSISTENCY_INDEPENDENT,
    CONSISTENCY_SNAPSHOT,
    count_matches,
    execute_page,
    execute_snapshot,
    resolve_ordering,
    resolve_projection,
)

_LOG = logging.getLogger("app.listing")

STATUS_SUCCESS = "success"
STATUS_FAIL = "fail"
STATUS_ERROR = "error"

DEFAULT_SORT = (SortClause(field="created_at", dir="asc"),)


@dataclass(frozen=True)
class ListingPolicy:
    resource: str
    default_page_size: int
    max_page_size: int
    private_fields: frozenset[str] = frozenset()
    field_types: Mapping[str, str] | None = None
    default_sort: tuple[SortClause, ...] = DEFAULT_SORT
    consistency: str = CONSISTENCY_INDEPENDENT

    def __post_init__(self):
        if self.default_page_size < 1 or self.max_page_size < 1:
            raise ValueError("page sizes must be positive")
        if self.consistency not in {CONSISTENCY_INDEPENDENT, CONSISTENCY_SNAPSHOT}:
            raise ValueError(f'unknown consistency mode "{self.consistency}"')


def listing_policy(resource: str, **overrides: Any) -> ListingPolicy:
    values: dict[str, Any] = {
        "default_page_size": settings.LISTING_DEFAULT_PAGE_SIZE,
        "max_page_size": settings.LISTING_MAX_PAGE_SIZE,
        "consistency": settings.LISTING_CONSISTENCY,
    }
    values.update(overrides)
    if "private_fields" in values:
        values["private_fields"] = frozenset(values["private_fields"])
    return ListingPolicy(resource=resource, **values)


@dataclass
class ListingResult:
    items: list[dict[str, Any]]
    total_size: int
    directives: QueryDirectives
    warnings: Sequence[str] = field(default_factory=tuple)


def build_envelope(resource: str, items: list[dict[str, Any]], total_size: int) -> dict[str, Any]:
    return {"status": STATUS_SUCCESS, "totalSize": int(total_size), resource: items}


def failure_envelope(status_code: int, message: str) -> dict[str, Any]:
    status = STATUS_ERROR if status_code >= 500 else STATUS_FAIL
    return FailureEnvelope(status=status, message=message).model_dump()


def parse_listing_request(params: Any, policy: ListingPolicy) -> QueryDirectives:
    return parse_query_directives(
        params,
        default_page_size=policy.default_page_size,
        max_page_size=policy.max_page_size,
    )


def run_listing(base: Query, model: type, params: Any, policy: ListingPolicy) -> ListingResult:
    if isinstance(params, QueryDirectives):
        directives = params
    else:
        directives = parse_listing_request(params, policy)
    field_kinds = policy.field_types
    if field_kinds is None:
        field_kinds = field_kinds_for_model(model, exclude=policy.private_fields)
    else:
        field_kinds = {name: kind for name, kind in field_kinds.items() if name not in policy.private_fields}
    compiled = compile_filters(model, directives.filters, field_kinds)
    ordering = resolve_ordering(
        model,
        directives.sort,
        default_sort=policy.default_sort,
        hidden=policy.private_fields,
    )
    columns = resolve_projection(model, directives.projection, hidden=policy.private_fields)
    _LOG.debug(
        "listing %s: filters=%s page=%s page_size=%s consistency=%s",
        policy.resource,
        len(compiled.clauses),
        directives.page,
        directives.page_size,
        policy.consistency,
    )

    page_args = {
        "ordering": ordering,
        "columns": columns,
        "offset": directives.offset,
        "limit": directives.page_size,
        "resource": policy.resource,
    }
    if policy.consistency == CONSISTENCY_SNAPSHOT:
        items, total = execute_snapshot(base, compiled, **page_args)
    else:
        # Two independent reads: the count may observe a newer snapshot than the page.
        items = execute_page(base, compiled, **page_args)
        total = count_matches(base, compiled, resource=policy.resource)
    return ListingResult(items=items, total_size=total, directives=directives, warnings=compiled.warnings)


def list_resource(base: Query, model: type, params: Any, policy: ListingPolicy) -> dict[str, Any]:
    result = run_listing(base, model, params, policy)
    return build_envelope(policy.resource, result.items, result.total_size)
