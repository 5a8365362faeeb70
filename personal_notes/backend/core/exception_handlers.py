"""
Exception Handlers.

FastAPI exception handlers that turn service and policy errors into the
standard ErrorResponse envelope. Every error is logged with the request
ID bound by RequestContextMiddleware.

Status mapping:
    NotFoundError           404  missing note, or a private note of another user
    ValidationError         400  note fields rejected by the service
    AuthenticationError     401  missing or invalid bearer token
    AuthorizationError      403  non-owner mutation, or admin route without role
    ConflictError           409
    DatabaseError           503
    RequestValidationError  422  body rejected by the pydantic schemas

Usage:
    from personal_notes.backend.core.exception_handlers import register_exception_handlers

    app = FastAPI()
    register_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from personal_notes.backend.core.exceptions import (
    ApplicationError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from personal_notes.backend.core.logging import get_logger
from personal_notes.backend.schemas.base import ErrorDetail, ErrorResponse, ResponseMetadata

logger = get_logger(__name__)

# Exact type match; unlisted ApplicationError subclasses become 500
EXCEPTION_STATUS_MAP: dict[type[ApplicationError], int] = {
    NotFoundError: 404,
    ValidationError: 400,
    AuthenticationError: 401,
    AuthorizationError: 403,
    ConflictError: 409,
    DatabaseError: 503,
}


def _get_request_id(request: Request) -> str | None:
    """
    Extract the request ID for the error envelope.

    Args:
        request: Incoming request

    Returns:
        The ID set by the middleware, else the X-Request-ID header, else None
    """
    # Set by RequestContextMiddleware
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    # Errors raised before the middleware ran
    return request.headers.get("x-request-id")


async def application_error_handler(
    request: Request,
    exc: ApplicationError,
) -> JSONResponse:
    """
    Handle all ApplicationError subclasses.

    Authentication failures also carry a ``WWW-Authenticate: Bearer``
    header.

    Args:
        request: Request that raised the error
        exc: Error raised by a dependency, service or the policy

    Returns:
        ErrorResponse JSON with the mapped status code
    """
    status_code = EXCEPTION_STATUS_MAP.get(type(exc), 500)
    request_id = _get_request_id(request)

    log_extra = {
        "code": exc.code,
        "message": exc.message,
        "status": status_code,
        "path": request.url.path,
        "method": request.method,
    }
    if request_id:
        log_extra["request_id"] = request_id

    # 5xx at ERROR, 4xx at WARNING
    if status_code >= 500:
        logger.error("Server error", extra=log_extra)
    else:
        logger.warning("Client error", extra=log_extra)

    error_detail = ErrorDetail(code=exc.code, message=exc.message)

    # Only validation errors expose details to the client
    if isinstance(exc, ValidationError) and exc.details:
        error_detail.details = exc.details

    metadata = ResponseMetadata(request_id=request_id)
    response = ErrorResponse(error=error_detail, metadata=metadata)

    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}

    return JSONResponse(
        status_code=status_code,
        content=response.model_dump(mode="json"),
        headers=headers,
    )


async def validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """
    Handle request body and parameter validation errors.

    Each pydantic error becomes one entry in
    ``details["validation_errors"]`` with its dotted field location,
    message and type.

    Args:
        request: Request that failed validation
        exc: Validation error raised by FastAPI

    Returns:
        ErrorResponse JSON with status 422 and code VAL_REQUEST_INVALID
    """
    request_id = _get_request_id(request)

    errors = exc.errors()
    # ("body", "title") becomes "body.title"
    details = {
        "validation_errors": [
            {
                "field": ".".join(str(loc) for loc in err.get("loc", [])),
                "message": err.get("msg", "Validation error"),
                "type": err.get("type", "unknown"),
            }
            for err in errors
        ]
    }

    logger.warning(
        "Request validation failed",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(errors),
            "request_id": request_id,
        },
    )

    error_detail = ErrorDetail(
        code="VAL_REQUEST_INVALID",
        message="Request validation failed",
        details=details,
    )

    metadata = ResponseMetadata(request_id=request_id)
    response = ErrorResponse(error=error_detail, metadata=metadata)

    return JSONResponse(
        status_code=422,
        content=response.model_dump(mode="json"),
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Handle unexpected exceptions.

    Args:
        request: Request that raised the exception
        exc: Any exception not handled above

    Returns:
        Generic ErrorResponse JSON with status 500 and code SYS_INTERNAL_ERROR
    """
    request_id = _get_request_id(request)

    # Full traceback goes to the log only
    logger.exception(
        "Unhandled exception",
        extra={
            "path": request.url.path,
            "method": request.method,
            "exception_type": type(exc).__name__,
            "request_id": request_id,
        },
    )

    # No exception text in the response body
    error_detail = ErrorDetail(
        code="SYS_INTERNAL_ERROR",
        message="An unexpected error occurred",
    )

    metadata = ResponseMetadata(request_id=request_id)
    response = ErrorResponse(error=error_detail, metadata=metadata)

    return JSONResponse(
        status_code=500,
        content=response.model_dump(mode="json"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with the FastAPI app.

    Called from create_app before the routers are included.

    Args:
        app: FastAPI application instance
    """
    # Service, policy and authentication errors
    app.add_exception_handler(ApplicationError, application_error_handler)

    # Malformed request bodies and parameters
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # Anything else
    app.add_exception_handler(Exception, unhandled_exception_handler)

    logger.debug("Exception handlers registered")
