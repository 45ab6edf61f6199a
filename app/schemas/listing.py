from typing import Any, Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field

Op = Literal["eq", "ne", "gt", "gte", "lt", "lte", "in"]
Dir = Literal["asc", "desc"]
Status = Literal["success", "fail", "error"]

OPERATORS: Tuple[str, ...] = ("eq", "ne", "gt", "gte", "lt", "lte", "in")
RESERVED_KEYS: Tuple[str, ...] = ("page", "limit", "sort", "fields")


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class FilterClause(_Frozen):
    field: str
    op: Op = "eq"
    value: Any


class SortClause(_Frozen):
    field: str
    dir: Dir = "asc"


class Projection(_Frozen):
    fields: Tuple[str, ...] = ()
    exclude: bool = False

    @property
    def is_default(self) -> bool:
        return not self.fields


class QueryDirectives(_Frozen):
    filters: Tuple[FilterClause, ...] = ()
    sort: Tuple[SortClause, ...] = ()
    projection: Projection = Projection()
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class FailureEnvelope(BaseModel):
    status: Status
    message: str
