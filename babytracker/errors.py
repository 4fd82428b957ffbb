"""
Exception handlers for the API.

Every error leaves the API as {"error": "<message>"} (plus "details" for
unexpected failures), which is the shape the web client reads:
- ValueError            -> 400
- NotFoundError         -> 404
- HTTPException         -> its own status code
- request validation    -> 400, listing the missing fields
- anything else         -> 500, logged with its traceback
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .services import NotFoundError

logger = logging.getLogger(__name__)

MISSING_ERROR_TYPES = ("missing", "string_too_short")


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    missing = [
        str(err["loc"][-1]) for err in errors if err.get("type") in MISSING_ERROR_TYPES and err.get("loc")
    ]
    if missing:
        message = f"Missing required fields: {', '.join(missing)}"
    else:
        message = "Invalid request"
    return _error(400, message, details=jsonable_encoder(errors))


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return _error(400, str(exc))


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(404, str(exc))


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception in %s %s: %s", request.method, request.url.path, exc, exc_info=exc
    )
    return _error(500, "Internal Server Error", details=str(exc))


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(ValueError, value_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
    logger.debug("Exception handlers registered")
