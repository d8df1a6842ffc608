"""
Boundary error mapping for the HTTP API.

Every failure leaves the API as ``{"error": <code>, "message": <text>}``.
Unexpected exceptions are logged and reported as a bare ``internal_error``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from taskhub_core.exceptions import (
    AuthError,
    InvalidTokenError,
    NotFoundError,
    TaskHubError,
    UsernameTakenError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# most specific first; first match along the MRO wins
STATUS_CODES = {
    InvalidTokenError: 403,
    AuthError: 401,
    ValidationError: 400,
    UsernameTakenError: 409,
    NotFoundError: 404,
}


def status_for(exc: TaskHubError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


def error_body(code: str, message: str) -> dict:
    return {"error": code, "message": message}


async def taskhub_error_handler(request: Request, exc: TaskHubError) -> JSONResponse:
    status_code = status_for(exc)
    if status_code == 500:
        logger.error("Unmapped TaskHub error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content=error_body("internal_error", "Internal server error"))
    return JSONResponse(status_code=status_code, content=error_body(exc.code, exc.message))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = f"{location}: {first.get('msg', 'invalid value')}" if location else "Invalid request"
    return JSONResponse(status_code=400, content=error_body("validation_error", message))


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_body("internal_error", "Internal server error"))


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TaskHubError, taskhub_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
