"""FastAPI exception handlers producing the standard error body.

Every failure is rendered as an ErrorResponse:
    {"success": false, "error_code", "error", "recovery", "details"}

The ErrorCode-to-HTTP status mapping:
- 400 Bad Request: validation failures, bad webhook signatures
- 404 Not Found: booking absent
- 405 Method Not Allowed: unsupported HTTP method on a known path
- 500 Internal Server Error: missing configuration, upstream failures

Usage:
    from showbook_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_405_METHOD_NOT_ALLOWED,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from showbook_shared.models.errors import BookingError, ErrorCode, ErrorResponse

logger = logging.getLogger(__name__)

# Map ErrorCode to HTTP status codes
ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_WEBHOOK_SIGNATURE: HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND: HTTP_404_NOT_FOUND,
    ErrorCode.METHOD_NOT_ALLOWED: HTTP_405_METHOD_NOT_ALLOWED,
    ErrorCode.CONFIGURATION_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.UPSTREAM_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.INTERNAL_ERROR: HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode, defaulting to 500."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_500_INTERNAL_SERVER_ERROR)


def _error_json(
    status_code: int,
    body: ErrorResponse,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


async def booking_error_handler(request: Request, exc: BookingError) -> JSONResponse:
    """Convert a BookingError to its JSON response."""
    status_code = get_http_status_for_error(exc.code)
    if status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
        logger.error(
            "%s %s failed: %s %s", request.method, request.url.path, exc.code.value, exc.details
        )
    return _error_json(status_code, exc.to_error_response())


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render request validation errors as a 400 ERR_VALIDATION.

    Absent fields are listed under ``details.missing``.
    """
    missing: list[str] = []
    errors: list[dict[str, Any]] = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        if error.get("type") == "missing" and loc:
            missing.append(loc[-1])
        errors.append({"loc": loc, "msg": error.get("msg", ""), "type": error.get("type", "")})

    details: dict[str, Any] = {"errors": errors}
    if missing:
        details["missing"] = missing
    return _error_json(
        HTTP_400_BAD_REQUEST,
        ErrorResponse.from_code(ErrorCode.VALIDATION_ERROR, details),
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """Wrap routing errors (404 unknown path, 405 wrong method) in the standard body."""
    if exc.status_code == HTTP_405_METHOD_NOT_ALLOWED:
        code = ErrorCode.METHOD_NOT_ALLOWED
        message = None
    elif exc.status_code == HTTP_404_NOT_FOUND:
        code = ErrorCode.NOT_FOUND
        message = str(exc.detail)
    elif exc.status_code < HTTP_500_INTERNAL_SERVER_ERROR:
        code = ErrorCode.VALIDATION_ERROR
        message = str(exc.detail)
    else:
        code = ErrorCode.INTERNAL_ERROR
        message = None

    return _error_json(
        exc.status_code,
        ErrorResponse.from_code(code, {"method": request.method}, message),
        headers=getattr(exc, "headers", None),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for uncaught exceptions; internal details are not exposed."""
    logger.exception("Unhandled exception: %s", exc)
    return _error_json(
        HTTP_500_INTERNAL_SERVER_ERROR,
        ErrorResponse.from_code(ErrorCode.INTERNAL_ERROR),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""
    app.add_exception_handler(BookingError, booking_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
