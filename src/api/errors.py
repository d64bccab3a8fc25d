# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Error translation and response envelope for the HTTP layer.

Routers convert domain errors with to_http_exception(). The handlers
installed by register_exception_handlers() render every failure as:

    {"ok": false, "code": 409, "data": {}, "errors": ["..."], "message": "..."}
"""

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.core.errors import DomainError
from src.models.common import ErrorResponse

logger = logging.getLogger(__name__)


def to_http_exception(error: DomainError) -> HTTPException:
    """Convert a domain error to an HTTPException of the matching status."""
    if error.status_code >= 500:
        logger.error("Server error: %s", error.message)
    else:
        logger.info("Request rejected (%d): %s", error.status_code, error.message)
    return HTTPException(status_code=error.status_code, detail=error.message)


def error_response(
    status_code: int,
    message: str,
    errors: list | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Build the failure envelope."""
    body = ErrorResponse(
        code=status_code,
        errors=errors if errors is not None else [message],
        message=message,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        return error_response(exc.status_code, "Internal Server Error")
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return error_response(exc.status_code, message, headers=getattr(exc, "headers", None))


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    errors = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        errors.append(f"{location}: {err.get('msg')}" if location else err.get("msg"))
    return error_response(status.HTTP_400_BAD_REQUEST, "Validation failed", errors)


async def domain_exception_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Unhandled server error: %s", exc.message)
        return error_response(exc.status_code, "Internal Server Error")
    return error_response(exc.status_code, exc.message)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope-rendering exception handlers on app."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(DomainError, domain_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
