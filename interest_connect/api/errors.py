"""Global error handlers ensuring request_id is included in JSON responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from interest_connect.api.request_id import get_request_id
from interest_connect.domain.common.errors import ServiceError

logger = logging.getLogger(__name__)


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_exc_handler(request: Request, exc: ServiceError):  # type: ignore[override]
        payload = {"detail": exc.reason, "request_id": get_request_id(request)}
        return JSONResponse(status_code=exc.status_code, content=payload)

    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
        detail = exc.detail
        if exc.status_code == 404 and detail == "Not Found":
            detail = "route_not_found"
        payload = {"detail": detail, "request_id": get_request_id(request)}
        return JSONResponse(status_code=exc.status_code, content=payload, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
        payload = {
            "detail": "validation_error",
            "errors": jsonable_errors(exc),
            "request_id": get_request_id(request),
        }
        return JSONResponse(status_code=422, content=payload)

    @app.exception_handler(Exception)
    async def unhandled_exc_handler(request: Request, exc: Exception):  # type: ignore[override]
        logger.exception("unhandled error", extra={"path": request.url.path})
        payload = {"detail": "server_error", "request_id": get_request_id(request)}
        return JSONResponse(status_code=500, content=payload)


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    errors = []
    for error in exc.errors():
        item = {key: error[key] for key in ("type", "loc", "msg") if key in error}
        errors.append(item)
    return errors
