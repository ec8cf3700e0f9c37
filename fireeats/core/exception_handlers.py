"""Centralized exception handlers for the FastAPI app.

Register with register_exception_handlers(app). Every error body has the
same shape: {"error": code, "message": text, "details": ...}. Domain
error codes map to statuses in _ERROR_CODE_STATUS; unknown codes are 400.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fireeats.core.config import get_settings
from fireeats.domain.exceptions import FireEatsException

logger = logging.getLogger(__name__)

_ERROR_CODE_STATUS: dict[str, int] = {
    "RESOURCE_NOT_FOUND": 404,
    "VALIDATION_ERROR": 400,
    "INDEX_OUT_OF_RANGE": 400,
    # Restaurant missing or malformed while adding a review
    "DATA_INTEGRITY_ERROR": 409,
    "TRANSACTION_CONFLICT": 409,
    "TRANSACTION_FAILED": 503,
    "SERVICE_UNAVAILABLE": 503,
    "STORE_WRITE_ERROR": 503,
    "STORE_UNAVAILABLE": 503,
}


def status_for_error_code(error_code: str) -> int:
    return _ERROR_CODE_STATUS.get(error_code, 400)


def _error_response(
    status_code: int, error: str, message: Any, details: Any = None
) -> JSONResponse:
    content: dict[str, Any] = {"error": error, "message": message}
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def _fireeats_exception_handler(
    request: Request, exc: FireEatsException
) -> JSONResponse:
    """Map a domain or store error to its status; store outages are logged."""
    status = status_for_error_code(exc.error_code)
    if status >= 500:
        logger.warning(
            "%s %s failed (%s): %s",
            request.method,
            request.url.path,
            exc.error_code,
            exc.message,
        )
    return _error_response(status, exc.error_code, exc.message, exc.details)


def _validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return 422 with pydantic's error list (bad body or query params)."""
    return _error_response(
        422, "VALIDATION_ERROR", "Request validation failed", exc.errors()
    )


def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return _error_response(exc.status_code, "HTTP_ERROR", exc.detail)


def _generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Return 500; include detail only when debug is True."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    detail = str(exc) if get_settings().debug else "Internal server error"
    return _error_response(500, "INTERNAL_ERROR", detail)


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers on the FastAPI app.

    Call once after creating the app. FireEatsException covers the domain
    and store errors (ValidationException, DataIntegrityException,
    TransactionFailedException, StoreWriteError, ...).
    """
    app.add_exception_handler(FireEatsException, _fireeats_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _generic_exception_handler)
