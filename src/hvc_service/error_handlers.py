"""
Error handling for the HVC service HTTP layer
"""

from typing import Any, Dict, Optional
from datetime import datetime
from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import structlog

from .types import ConflictError, HVCServiceError, NotFoundError, PersistenceError, ValidationError

logger = structlog.get_logger()


class ErrorCode:
    """Standard error codes for the HVC service"""

    # Client errors (4xx)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_MANIFEST = "INVALID_MANIFEST"
    PASSENGER_NOT_FOUND = "PASSENGER_NOT_FOUND"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    CONFLICT = "CONFLICT"

    # Server errors (5xx)
    PERSISTENCE_UNAVAILABLE = "PERSISTENCE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorHandler:
    """Centralized error response formatting"""

    @staticmethod
    def create_error_response(
        message: str,
        error_code: str,
        details: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Create standardized error response"""

        error_response = {
            "status": "error",
            "message": message,
            "error_code": error_code,
            "timestamp": datetime.now().isoformat()
        }

        if details:
            error_response["details"] = details

        return error_response


class ExceptionMapper:
    """Map service exceptions to HTTP responses"""

    @staticmethod
    def map_exception(exception: Exception) -> HTTPException:
        """Map service exceptions to HTTP exceptions"""

        if isinstance(exception, HTTPException):
            return exception

        if isinstance(exception, ValidationError):
            status_code, error_code = 422, ErrorCode.VALIDATION_ERROR
            message, details = str(exception), None
        elif isinstance(exception, NotFoundError):
            status_code = 404
            error_code = ErrorCode.PASSENGER_NOT_FOUND if exception.resource == "Passenger" else ErrorCode.RESOURCE_NOT_FOUND
            message, details = str(exception), {"resource": exception.resource, "id": exception.identifier}
        elif isinstance(exception, ConflictError):
            status_code, error_code = 409, ErrorCode.CONFLICT
            message, details = str(exception), None
        elif isinstance(exception, PersistenceError):
            status_code, error_code = 503, ErrorCode.PERSISTENCE_UNAVAILABLE
            message = "The passenger store is temporarily unavailable. Please try again."
            details = {"upstream_status": exception.status_code} if exception.status_code else None
        else:
            status_code, error_code = 500, ErrorCode.INTERNAL_ERROR
            message = "We're experiencing technical difficulties. Please try again later."
            details = {"exception_type": type(exception).__name__}

        return HTTPException(
            status_code=status_code,
            detail=ErrorHandler.create_error_response(
                message=message,
                error_code=error_code,
                details=details
            )
        )


async def service_exception_handler(request: Request, exc: HVCServiceError) -> JSONResponse:
    """Handler for HVC service exceptions raised by endpoints"""

    http_exception = ExceptionMapper.map_exception(exc)

    log = logger.error if http_exception.status_code >= 500 else logger.warning
    log(
        "service_error",
        error_type=type(exc).__name__,
        error_message=str(exc),
        status_code=http_exception.status_code,
        url=str(request.url),
        method=request.method
    )

    return JSONResponse(status_code=http_exception.status_code, content=http_exception.detail)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled exceptions"""

    logger.exception(
        "unhandled_error",
        error_type=type(exc).__name__,
        url=str(request.url),
        method=request.method
    )

    http_exception = ExceptionMapper.map_exception(exc)
    return JSONResponse(status_code=http_exception.status_code, content=http_exception.detail)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for request validation exceptions"""

    logger.warning(
        "Request validation failed",
        error=str(exc),
        url=str(request.url)
    )

    return JSONResponse(
        status_code=422,
        content=ErrorHandler.create_error_response(
            message="Request validation failed. Please check your input and try again.",
            error_code=ErrorCode.VALIDATION_ERROR,
            details={"errors": jsonable_encoder(exc.errors())}
        )
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handler for HTTP exceptions"""

    if isinstance(exc.detail, dict):
        content = exc.detail
    else:
        content = ErrorHandler.create_error_response(
            message=str(exc.detail),
            error_code=ErrorCode.RESOURCE_NOT_FOUND if exc.status_code == 404 else ErrorCode.VALIDATION_ERROR
        )

    return JSONResponse(status_code=exc.status_code, content=content)
