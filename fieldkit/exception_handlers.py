"""
Global Exception Handlers for Fieldkit

Every error leaves the API in the same envelope:

{
    "error": {
        "status_code": 404,
        "error_code": "FIELDTYPE_NOT_FOUND",
        "message": "Fieldtype 'toggle_password' is not registered",
        "type": "Not Found",
        "details": {"handle": "toggle_password"},
        "path": "/api/v1/fieldtypes/toggle_password"
    }
}

Naming-convention failures carry the closest valid component name in
`details.expected`; the handler repeats it in the message so a plugin author
sees the fix without reading the details.
"""

import logging
from typing import Any, Union

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from fieldkit.exceptions import ErrorCode, FieldkitError

logger = logging.getLogger(__name__)

_ERROR_TYPES: dict[int, str] = {
    status.HTTP_400_BAD_REQUEST: "Bad Request",
    status.HTTP_404_NOT_FOUND: "Not Found",
    status.HTTP_409_CONFLICT: "Conflict",
    status.HTTP_422_UNPROCESSABLE_ENTITY: "Validation Error",
    status.HTTP_500_INTERNAL_SERVER_ERROR: "Internal Server Error",
    status.HTTP_502_BAD_GATEWAY: "Bad Gateway",
    status.HTTP_503_SERVICE_UNAVAILABLE: "Service Unavailable",
}

# Fallback codes for plain HTTPExceptions raised by FastAPI/Starlette (unknown routes, bad methods)
_HTTP_ERROR_CODES: dict[int, ErrorCode] = {
    status.HTTP_400_BAD_REQUEST: ErrorCode.VALIDATION_FAILED,
    status.HTTP_404_NOT_FOUND: ErrorCode.RESOURCE_NOT_FOUND,
    status.HTTP_409_CONFLICT: ErrorCode.VALIDATION_DUPLICATE_RESOURCE,
    status.HTTP_422_UNPROCESSABLE_ENTITY: ErrorCode.VALIDATION_FAILED,
    status.HTTP_500_INTERNAL_SERVER_ERROR: ErrorCode.INTERNAL_ERROR,
    status.HTTP_502_BAD_GATEWAY: ErrorCode.SERVICE_UNAVAILABLE,
    status.HTTP_503_SERVICE_UNAVAILABLE: ErrorCode.SERVICE_UNAVAILABLE,
}

# Detail keys worth promoting to log record attributes
_LOGGED_DETAILS = ("handle", "field", "component", "form_id")


def get_error_type(status_code: int) -> str:
    """Human-readable label for a status code."""
    return _ERROR_TYPES.get(status_code, "Error")


def get_http_error_code(status_code: int) -> str:
    return _HTTP_ERROR_CODES.get(status_code, ErrorCode.UNKNOWN_ERROR).value


def create_error_response(
    status_code: int,
    message: str,
    error_code: str | ErrorCode | None = None,
    details: dict[str, Any] | None = None,
    path: str | None = None,
) -> JSONResponse:
    """
    Build the error envelope.

    `error_code`, `details` and `path` are omitted from the body when empty.
    """
    body: dict[str, Any] = {"status_code": status_code, "message": message, "type": get_error_type(status_code)}
    optional = {
        "error_code": error_code.value if isinstance(error_code, ErrorCode) else error_code,
        "details": details,
        "path": path,
    }
    body.update({key: value for key, value in optional.items() if value})
    return JSONResponse(status_code=status_code, content={"error": body})


def describe_error(exc: FieldkitError) -> str:
    """Client-facing message, with the suggested component name when one is known."""
    expected = exc.details.get("expected")
    if exc.error_code == ErrorCode.FIELDTYPE_COMPONENT_NAME_MISMATCH and expected:
        return f"{exc.message} (expected '{expected}')"
    return exc.message


def _log_context(request: Request, **extra: Any) -> dict[str, Any]:
    context = {"path": request.url.path, "method": request.method}
    details = extra.pop("details", None) or {}
    context.update({key: details[key] for key in _LOGGED_DETAILS if key in details})
    context.update(extra)
    return context


async def fieldkit_exception_handler(request: Request, exc: FieldkitError) -> JSONResponse:
    """Registry, store and form errors."""
    # 5xx here means a misconfigured deployment (e.g. a fieldtype shipped without its component)
    log = logger.error if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR else logger.warning
    log(
        "%s: %s",
        exc.error_code.value,
        exc.message,
        extra=_log_context(request, status_code=exc.status_code, details=exc.details),
    )
    return create_error_response(
        status_code=exc.status_code,
        message=describe_error(exc),
        error_code=exc.error_code,
        details=exc.details,
        path=request.url.path,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.warning("HTTP %s: %s", exc.status_code, exc.detail, extra=_log_context(request))
    return create_error_response(
        status_code=exc.status_code,
        message=str(exc.detail),
        error_code=get_http_error_code(exc.status_code),
        path=request.url.path,
    )


def _flatten_validation_errors(
    exc: Union[RequestValidationError, PydanticValidationError],
) -> list[dict[str, str]]:
    # Request bodies report locations as ("body", "fields", 0, ...); the prefix is noise to clients
    skip_body = isinstance(exc, RequestValidationError)
    flattened = []
    for error in exc.errors():
        loc = [str(part) for part in error["loc"] if not (skip_body and part == "body")]
        flattened.append({"field": ".".join(loc), "message": error["msg"], "type": error["type"]})
    return flattened


async def validation_exception_handler(
    request: Request, exc: Union[RequestValidationError, PydanticValidationError]
) -> JSONResponse:
    """Request payloads that fail schema validation."""
    errors = _flatten_validation_errors(exc)
    logger.warning(
        "Request validation failed with %d error(s)", len(errors), extra=_log_context(request, errors=errors)
    )
    return create_error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        message="Validation error",
        error_code=ErrorCode.VALIDATION_FAILED,
        details={"validation_errors": errors},
        path=request.url.path,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything else: logged with traceback, reported without internals."""
    logger.error(
        "Unhandled %s: %s", type(exc).__name__, exc, exc_info=exc, extra=_log_context(request)
    )
    return create_error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        message="An unexpected error occurred. Please try again later.",
        error_code=ErrorCode.INTERNAL_ERROR,
        path=request.url.path,
    )


def register_exception_handlers(app: FastAPI) -> None:
    handlers = [
        (FieldkitError, fieldkit_exception_handler),
        (StarletteHTTPException, http_exception_handler),
        (RequestValidationError, validation_exception_handler),
        (PydanticValidationError, validation_exception_handler),
        (Exception, unhandled_exception_handler),
    ]
    for exc_class, handler in handlers:
        app.add_exception_handler(exc_class, handler)
    logger.info("Registered %d exception handlers", len(handlers))
