from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import ListingError, PersistenceFailure
from app.core.http_hardening import request_id_for
from app.services.listing import failure_envelope

_LOG = logging.getLogger("app.errors")

INTERNAL_ERROR_MESSAGE = "Internal server error"


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(PersistenceFailure)
    async def _persistence_failure(request: Request, exc: PersistenceFailure):
        _LOG.error(
            "persistence failure resource=%s filters=%s path=%s request_id=%s",
            exc.resource,
            exc.filter_description,
            request.url.path,
            request_id_for(request),
            exc_info=exc,
        )
        return JSONResponse(status_code=exc.status_code, content=failure_envelope(exc.status_code, INTERNAL_ERROR_MESSAGE))

    @app.exception_handler(ListingError)
    async def _listing_error(request: Request, exc: ListingError):
        _LOG.warning("%s on %s: %s request_id=%s", exc.code, request.url.path, exc.message, request_id_for(request))
        return JSONResponse(status_code=exc.status_code, content=failure_envelope(exc.status_code, exc.message))

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        message = str(exc.detail) if exc.status_code < 500 else INTERNAL_ERROR_MESSAGE
        return JSONResponse(
            status_code=exc.status_code,
            content=failure_envelope(exc.status_code, message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError):
        _LOG.warning("validation error on %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content=failure_envelope(400, "Invalid request data"))

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        _LOG.error("unhandled error on %s request_id=%s", request.url.path, request_id_for(request), exc_info=exc)
        return JSONResponse(status_code=500, content=failure_envelope(500, INTERNAL_ERROR_MESSAGE))
