"""
Error Handling Middleware for HomeServices

Centralized error handling:
- Structured error responses
- Logging of errors
- Exception translation (storage and validation errors to HTTP statuses)
"""

import traceback
from datetime import datetime, timezone

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from homeservices.storage.models import ConversionError, MissingRelationError, UnsavedEntityError
from homeservices.storage.user_repository import EmailTakenError
from homeservices.validation import ValidationFailure


class HomeServicesException(Exception):
    """Base exception for HomeServices errors."""

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = 500,
        detail: str = None,
        headers: dict = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.detail = detail
        self.headers = headers
        super().__init__(message)


class BadRequestError(HomeServicesException):
    """Malformed body or invalid field value."""

    def __init__(self, message: str = "Bad request", detail: str = None):
        super().__init__(
            message=message,
            code="BAD_REQUEST",
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )


class UnauthenticatedError(HomeServicesException):
    """Missing or invalid credentials."""

    def __init__(self, detail: str = None):
        super().__init__(
            message="Unauthorized",
            code="UNAUTHORIZED",
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Basic"},
        )


class ForbiddenError(HomeServicesException):
    """Valid identity without the required privilege."""

    def __init__(self, detail: str = None):
        super().__init__(
            message="Forbidden",
            code="FORBIDDEN",
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
        )


class NotFoundError(HomeServicesException):
    """Resource not found."""

    def __init__(self, resource: str, identifier=None):
        super().__init__(
            message=f"{resource} not found",
            code="NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No {resource} with identifier '{identifier}' exists" if identifier is not None else None,
        )


class ConflictError(HomeServicesException):
    """Duplicate value for a unique field."""

    def __init__(self, message: str, detail: str = None):
        super().__init__(
            message=message,
            code="CONFLICT",
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )


class ServerError(HomeServicesException):
    """Broken invariant or unexpected storage state."""

    def __init__(self, message: str = "Internal Server Error", detail: str = None):
        super().__init__(
            message=message,
            code="SERVER_ERROR",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
        )


def create_error_response(
    error: str,
    code: str,
    status_code: int,
    detail: str = None,
    headers: dict = None,
) -> JSONResponse:
    """Create standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "code": code,
            "detail": detail,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        headers=headers,
    )


def setup_exception_handlers(app):
    """Register exception handlers with FastAPI app."""

    @app.exception_handler(HomeServicesException)
    async def homeservices_exception_handler(request: Request, exc: HomeServicesException):
        if exc.status_code >= 500:
            logger.error(f"HomeServices error: {exc.code} - {exc.message} ({exc.detail})")
        else:
            logger.warning(f"HomeServices error: {exc.code} - {exc.message}")
        return create_error_response(
            error=exc.message,
            code=exc.code,
            status_code=exc.status_code,
            detail=exc.detail,
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    @app.exception_handler(ValidationError)
    @app.exception_handler(ConversionError)
    @app.exception_handler(ValidationFailure)
    async def bad_request_handler(request: Request, exc: Exception):
        return await homeservices_exception_handler(
            request, BadRequestError(detail=str(exc))
        )

    @app.exception_handler(EmailTakenError)
    async def email_taken_handler(request: Request, exc: EmailTakenError):
        return await homeservices_exception_handler(
            request, ConflictError("Account already exists", detail=str(exc))
        )

    @app.exception_handler(MissingRelationError)
    @app.exception_handler(UnsavedEntityError)
    async def invariant_exception_handler(request: Request, exc: Exception):
        return await homeservices_exception_handler(
            request, ServerError(detail=f"{type(exc).__name__}: {exc}")
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception: {type(exc).__name__}: {str(exc)}\n{traceback.format_exc()}"
        )
        return create_error_response(
            error="Internal Server Error",
            code="INTERNAL_ERROR",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred",
        )
