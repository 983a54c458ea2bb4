"""Error Handlers — every failure leaves the API in the RemitError envelope.

Invariants:
    - RemitError → its own status, envelope and headers (Retry-After on 429)
    - RequestValidationError → 400 VALIDATION_ERROR; context.field names the first
      offending parameter, error.details lists every one as "<location>.<name>"
    - Any other exception → 500 INTERNAL_ERROR with a generic message
    - 4xx is logged at WARNING, 5xx at ERROR with the transfer/quote/reference ids

Design Decisions:
    - Validation and unexpected failures are converted to RemitError first, so one
      writer (_error_response) shapes every error body
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from remit.core.errors import (
    ErrorCategory, ErrorSeverity, RemitError, RemitValidationError,
)

logger = logging.getLogger(__name__)

REQUEST_LOCATIONS = frozenset({"body", "query", "path", "header", "cookie"})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RemitError, _handle_remit_error)
    app.add_exception_handler(RequestValidationError, _handle_request_validation)
    app.add_exception_handler(Exception, _handle_unexpected)


async def _handle_remit_error(request: Request, exc: RemitError) -> JSONResponse:
    return _error_response(request, exc)


async def _handle_request_validation(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    first_field = _parameter_name(exc.errors()[0]["loc"]) if details else None
    error = RemitValidationError("Invalid request data", first_field)
    return _error_response(request, error, details)


async def _handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
        exc_info=exc,
    )
    error = RemitError(
        "An unexpected error occurred", "INTERNAL_ERROR",
        ErrorCategory.INTERNAL, ErrorSeverity.CRITICAL,
    )
    return _error_response(request, error, log=False)


def _error_response(
    request: Request,
    exc: RemitError,
    details: list[dict] | None = None,
    log: bool = True,
) -> JSONResponse:
    if log:
        logger.log(
            _log_level(exc),
            f"{exc.code} on {request.method} {request.url.path}: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "transfer_id": exc.context.transfer_id,
                "quote_id": exc.context.quote_id,
                "reference_code": exc.context.reference_code,
            },
        )
    body = exc.to_response()
    if details is not None:
        body["error"]["details"] = details
    return JSONResponse(
        status_code=exc.http_status,
        content=body,
        headers=exc.response_headers() or None,
    )


def _log_level(exc: RemitError) -> int:
    return logging.ERROR if exc.http_status >= 500 else logging.WARNING


def _parameter_name(location: tuple) -> str:
    """("query", "sendAmount") -> "sendAmount"; nested body paths keep their dots."""
    parts = [str(part) for part in location]
    if len(parts) > 1 and parts[0] in REQUEST_LOCATIONS:
        parts = parts[1:]
    return ".".join(parts)
