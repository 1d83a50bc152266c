"""
Exception handlers for the incidents API.

Domain errors raised by the workflow service are mapped onto HTTP status codes
and rendered with the standard error envelope.
"""

import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ...config import get_logger
from ...core.exceptions import (
    AssignmentNotFoundError,
    DomainError,
    IncidentDeskError,
    IncidentNotFoundError,
    InvalidIncidentError,
    InvalidTransitionError,
)
from .models import ErrorDetail, ErrorResponse

logger = get_logger("api.exception_handlers")

STATUS_FOR_ERROR: dict[type[DomainError], int] = {
    IncidentNotFoundError: 404,
    AssignmentNotFoundError: 404,
    InvalidTransitionError: 409,
    InvalidIncidentError: 422,
}

HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    422: "UNPROCESSABLE_ENTITY",
}


def get_request_id(request: Request) -> str:
    """
    Extract or generate request ID for correlation.

    Args:
        request: FastAPI request object

    Returns:
        Request ID string
    """
    request_id = getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID")
    return request_id or str(uuid.uuid4())


def _status_for(exc: IncidentDeskError) -> int:
    for error_type, status_code in STATUS_FOR_ERROR.items():
        if isinstance(exc, error_type):
            return status_code
    return 400


async def incident_desk_exception_handler(request: Request, exc: IncidentDeskError) -> JSONResponse:
    """Render an application error with the status code of its type."""
    status_code = _status_for(exc)
    request_id = get_request_id(request)

    logger.warning(
        "Request refused",
        request_id=request_id,
        error_code=exc.error_code,
        status_code=status_code,
        path=request.url.path,
        method=request.method,
    )

    details = dict(exc.details)
    field = details.pop("field", None)
    error_response = ErrorResponse.create_error(
        message=exc.message,
        error_code=exc.error_code,
        error_type=exc.__class__.__name__,
        request_id=request_id,
        field=field,
        context=details,
    )
    return JSONResponse(status_code=status_code, content=error_response.model_dump(mode="json"))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    request_id = get_request_id(request)
    logger.warning("HTTP exception", request_id=request_id, status_code=exc.status_code, path=request.url.path)

    error_response = ErrorResponse.create_error(
        message=str(exc.detail) if exc.detail else f"HTTP error {exc.status_code}",
        error_code=HTTP_ERROR_CODES.get(exc.status_code, "HTTP_ERROR"),
        error_type="HTTPException",
        request_id=request_id,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(mode="json"),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle FastAPI request validation errors.

    Each invalid field becomes one entry of ``errors``; the location prefix
    (``body``, ``query``, ``path``) is dropped from the field name.
    """
    request_id = get_request_id(request)
    errors = exc.errors()

    details = []
    for error in errors:
        location = [str(part) for part in error["loc"]]
        field = ".".join(location[1:]) if len(location) > 1 else ".".join(location)
        details.append(
            ErrorDetail(error_code="VALIDATION_ERROR", error_type="RequestValidationError", field=field, description=error["msg"])
        )

    logger.warning(
        "Validation error",
        request_id=request_id,
        fields=[d.field for d in details],
        path=request.url.path,
        method=request.method,
    )

    first = details[0] if details else None
    error_response = ErrorResponse.create_error(
        message="Request validation failed",
        error_code="VALIDATION_ERROR",
        error_type="RequestValidationError",
        request_id=request_id,
        field=first.field if first else None,
        context={"error_count": len(errors)},
        extra_errors=details[1:],
    )
    return JSONResponse(status_code=422, content=error_response.model_dump(mode="json"))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort handler; never exposes internals."""
    request_id = get_request_id(request)
    logger.error(
        "Unhandled exception",
        request_id=request_id,
        exception_type=exc.__class__.__name__,
        path=request.url.path,
        method=request.method,
        exc_info=exc,
    )

    error_response = ErrorResponse.create_error(
        message="Internal server error",
        error_code="INTERNAL_SERVER_ERROR",
        error_type="InternalError",
        request_id=request_id,
    )
    return JSONResponse(status_code=500, content=error_response.model_dump(mode="json"))


def install_exception_handlers(app: FastAPI) -> None:
    """
    Install all exception handlers on FastAPI app.

    Args:
        app: FastAPI application instance
    """
    app.add_exception_handler(IncidentDeskError, incident_desk_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.debug("Exception handlers installed")


__all__ = [
    "install_exception_handlers",
    "get_request_id",
    "incident_desk_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "generic_exception_handler",
]
