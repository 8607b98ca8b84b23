"""
Response envelope and error handlers.

Every response has the shape {success: bool, data? | message? | errors?}.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from inkpress.core.errors import InkpressError, ValidationError
from inkpress.integrations.sentry import capture_exception

logger = logging.getLogger(__name__)


def ok(data: Any = None, message: str | None = None, status_code: int = 200, **extra: Any) -> JSONResponse:
    """Successful envelope."""
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return JSONResponse(jsonable_encoder(body), status_code=status_code)


def fail(
    status_code: int,
    message: str,
    errors: list[dict[str, Any]] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Failure envelope."""
    body: dict[str, Any] = {"success": False, "message": message}
    if errors:
        body["errors"] = errors
    return JSONResponse(body, status_code=status_code, headers=headers)


def install_error_handlers(app: FastAPI) -> None:
    """Map domain errors, request validation and crashes onto the envelope."""

    @app.exception_handler(InkpressError)
    async def handle_domain_error(request: Request, exc: InkpressError) -> JSONResponse:
        errors = exc.errors if isinstance(exc, ValidationError) else None
        return fail(exc.status_code, exc.message, errors)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
        converted = ValidationError.from_pydantic(exc)
        return fail(400, converted.message, converted.errors)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return fail(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        capture_exception(exc, path=request.url.path, method=request.method)
        return fail(500, "Server error")
