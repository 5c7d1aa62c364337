"""
Exception handlers for FastAPI application.

Every failure leaves the API as the same envelope,
``{"success": false, "error": "<Kind>"}``. The body never carries a
message, so two failures of the same kind are byte-identical whatever
caused them.

This module provides:
- Application exception handler (AppException)
- Request validation handler (RequestValidationError, including malformed JSON)
- Rate limit exceeded handler (RateLimitExceeded)
- General unhandled exception handler (Exception)
"""

import logging

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from calendarium.exceptions import (
    AppException,
    InternalError,
    InvalidDataError,
    RateLimitExceededError,
)

logger = logging.getLogger(__name__)


def error_response(exc: AppException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle custom application exceptions.

    Server-side kinds are logged as errors, client-side kinds as warnings.
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"Application exception: {exc.error_code} - {exc.message} "
        f"({request.method} {request.url.path})"
    )
    return error_response(exc)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors.

    Schema violations and bodies that are not valid JSON both become
    ``400 InvalidData``.
    """
    fields = [".".join(str(loc) for loc in error["loc"]) for error in exc.errors()]
    logger.warning(f"Validation error on {request.method} {request.url.path}: {fields}")
    return error_response(InvalidDataError())


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle rate limit exceeded errors with ``429 RateLimitExceeded``."""
    logger.warning(
        f"Rate limit exceeded: {request.client.host if request.client else 'unknown'} "
        f"on {request.url.path} ({exc.detail})"
    )
    return error_response(RateLimitExceededError())


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Logs the full error and answers ``500 Internal`` without exposing any
    detail.
    """
    logger.error(
        f"Unexpected error on {request.method} {request.url.path}: {exc}",
        exc_info=True,
    )
    return error_response(InternalError())
