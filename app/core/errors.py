from __future__ import annotations


class ListingError(Exception):
    status_code = 400
    code = "LISTING_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidPagination(ListingError):
    code = "INVALID_PAGINATION"

    def __init__(self, param: str, raw_value: str):
        super().__init__(f'Invalid value for "{param}": expected a positive integer')
        self.param = param
        self.raw_value = raw_value


class UnsupportedOperator(ListingError):
    code = "UNSUPPORTED_OPERATOR"

    def __init__(self, param: str, operator: str):
        super().__init__(f'Unsupported filter operator "{operator}" in "{param}"')
        self.param = param
        self.operator = operator


class InvalidFilterValue(ListingError):
    code = "INVALID_FILTER_VALUE"

    def __init__(self, field: str, kind: str):
        super().__init__(f'Invalid filter value for field "{field}" ({kind})')
        self.field = field
        self.kind = kind


class InvalidProjection(ListingError):
    code = "INVALID_PROJECTION"

    def __init__(self):
        super().__init__('"fields" cannot mix included and excluded fields')


class PersistenceFailure(ListingError):
    status_code = 500
    code = "PERSISTENCE_FAILURE"

    def __init__(self, resource: str, filter_description: str):
        super().__init__(f"Reading {resource} failed")
        self.resource = resource
        self.filter_description = filter_description
