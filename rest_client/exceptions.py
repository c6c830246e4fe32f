"""
Custom exception classes and error handling for the REST Client service.

Engine errors (configuration, request bodies, transport failures) are raised
by the services layer; API errors carry an HTTP status and are converted to
consistent JSON responses by the handlers registered on the FastAPI app.
"""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError


class ErrorResponse(BaseModel):
    """Standard error response format."""
    detail: str
    error_code: str | None = None


class RestClientError(Exception):
    """Base class for request execution engine errors."""


class ConfigError(RestClientError):
    """Raised when the settings file cannot be loaded or validated."""


class StreamConsumedError(RestClientError):
    """Raised when a consume-once byte stream is read a second time."""


class BodyStreamError(RestClientError):
    """Raised when draining a request body stream fails."""


class RequestExecutionError(RestClientError):
    """
    Raised when the transport fails to complete an exchange.

    Attributes:
        error_type: Short machine-readable failure category
        details: Underlying transport error message
    """
    error_type = "unknown"

    def __init__(self, message: str, details: str | None = None):
        self.message = message
        self.details = details
        super().__init__(message)


class RequestTimeoutError(RequestExecutionError):
    """Raised when the configured timeout elapses."""
    error_type = "timeout"


class ConnectionFailedError(RequestExecutionError):
    """Raised on connection, protocol and other network failures."""
    error_type = "network_error"


class InvalidRequestURLError(RequestExecutionError):
    """Raised when the request URL cannot be sent."""
    error_type = "invalid_url"


class ClientCertificateError(RequestExecutionError):
    """Raised when client certificate material cannot be loaded."""
    error_type = "certificate_error"


class InvalidRequestHeaderError(RequestExecutionError):
    """Raised when a request header cannot be encoded for the wire."""
    error_type = "invalid_header"


class APIException(Exception):
    """Base exception for API errors."""

    def __init__(
        self,
        detail: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: str | None = None
    ):
        self.detail = detail
        self.status_code = status_code
        self.error_code = error_code
        super().__init__(detail)


class ResourceNotFoundError(APIException):
    """Exception raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: Any):
        super().__init__(
            detail=f"{resource_type} with id {resource_id} not found",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="RESOURCE_NOT_FOUND"
        )


class RequestCancelledError(APIException):
    """Exception raised when a request was cancelled before its response was rendered."""

    def __init__(self, request_id: str):
        super().__init__(
            detail=f"Request {request_id} was cancelled",
            status_code=status.HTTP_409_CONFLICT,
            error_code="REQUEST_CANCELLED"
        )


# Transport failure category -> HTTP status returned to the caller
EXECUTION_ERROR_STATUS = {
    "timeout": status.HTTP_504_GATEWAY_TIMEOUT,
    "network_error": status.HTTP_502_BAD_GATEWAY,
    "invalid_url": status.HTTP_400_BAD_REQUEST,
    "certificate_error": status.HTTP_400_BAD_REQUEST,
    "invalid_header": status.HTTP_400_BAD_REQUEST,
}


async def api_exception_handler(request: Request, exc: APIException) -> JSONResponse:
    """Handler for custom API exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error_code": exc.error_code}
    )


async def execution_exception_handler(
    request: Request, exc: RequestExecutionError
) -> JSONResponse:
    """Handler for transport failures raised while executing a request."""
    return JSONResponse(
        status_code=EXECUTION_ERROR_STATUS.get(
            exc.error_type, status.HTTP_500_INTERNAL_SERVER_ERROR
        ),
        content={
            "detail": {
                "error": exc.message,
                "error_type": exc.error_type,
                "details": exc.details,
            }
        }
    )


async def body_stream_exception_handler(
    request: Request, exc: BodyStreamError
) -> JSONResponse:
    """Handler for request bodies that could not be read."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": str(exc), "error_code": "BODY_STREAM_ERROR"}
    )


async def config_exception_handler(
    request: Request, exc: ConfigError
) -> JSONResponse:
    """Handler for settings files that cannot be loaded."""
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc), "error_code": "CONFIG_ERROR"}
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    errors = exc.errors()
    # Format validation errors into a readable message
    error_messages = []
    for error in errors:
        loc = " -> ".join(str(l) for l in error["loc"])
        msg = error["msg"]
        error_messages.append(f"{loc}: {msg}")

    detail = "; ".join(error_messages) if error_messages else "Validation error"

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": detail, "error_code": "VALIDATION_ERROR"}
    )


async def sqlalchemy_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """Handler for SQLAlchemy database errors."""
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error occurred", "error_code": "DATABASE_ERROR"}
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application."""
    app.add_exception_handler(APIException, api_exception_handler)
    app.add_exception_handler(RequestExecutionError, execution_exception_handler)
    app.add_exception_handler(BodyStreamError, body_stream_exception_handler)
    app.add_exception_handler(ConfigError, config_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
