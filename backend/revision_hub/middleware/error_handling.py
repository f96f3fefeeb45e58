"""
Error Handling Middleware

Provides consistent, informative error responses across the API.

Features:
- Standardized error response format
- Correlation IDs for log tracking
- Sanitized responses (hides internal details in production)
- Custom exception classes for each failure kind of the review flow

Usage:
    from revision_hub.middleware.error_handling import (
        ItemNotFoundError,
        setup_error_handling,
    )

    setup_error_handling(app, debug=settings.DEBUG)

    raise ItemNotFoundError(f"Item {item_ref} not found")

Exception handling hierarchy:
    - HTTPException: Left to FastAPI's built-in handler
    - RequestValidationError: Malformed body/query → 400 validation_error
    - ServiceError: Custom exceptions → structured JSON response
    - Exception: Catch-all for unexpected errors → sanitized 500

    ServiceError and RequestValidationError are rendered by exception
    handlers registered on the app; ErrorHandlingMiddleware wraps the whole
    stack and catches anything that escapes them.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)


# =============================================================================
# Error Response Schema
# =============================================================================


class ErrorResponse(BaseModel):
    """Standardized error response."""

    success: bool = False
    error: str  # Error code (e.g., "not_found")
    message: str  # Human-readable message
    error_id: str  # For log correlation
    details: Optional[dict] = None  # Additional context (sanitized)
    timestamp: datetime


# =============================================================================
# Custom Exceptions
# =============================================================================


class ServiceError(Exception):
    """
    Base exception for service errors.

    Provides consistent error handling with:
    - HTTP status code
    - Error code for categorization
    - Optional details for debugging

    Example:
        raise ServiceError("Database connection failed", status_code=503)
    """

    status_code: int = 500
    error_code: str = "service_error"

    def __init__(
        self,
        message: str,
        status_code: int = None,
        error_code: str = None,
        details: dict = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code:
            self.status_code = status_code
        if error_code:
            self.error_code = error_code
        self.details = details


class ReviewValidationError(ServiceError):
    """
    Request validation error.

    Raised when a rating is outside 1-4, a reference is empty, or a custom
    reminder date lies in the past.
    """

    status_code = 400
    error_code = "validation_error"


class ItemNotFoundError(ServiceError):
    """
    Reviewable item not found.

    Raised when an item reference matches neither an item id nor a question
    id owned by the user.
    """

    status_code = 404
    error_code = "not_found"


class NothingToUndoError(ServiceError):
    """
    No review snapshot exists for the item.

    The item exists but has never been reviewed, or its last review was
    already undone.
    """

    status_code = 409
    error_code = "nothing_to_undo"


class PersistenceError(ServiceError):
    """
    Storage failure while applying a review.

    The transaction was rolled back; nothing was changed.
    """

    status_code = 500
    error_code = "persistence_error"


# =============================================================================
# Error Handling Middleware
# =============================================================================


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    - Catches unhandled exceptions
    - Logs with correlation ID
    - Returns consistent error format
    - Hides internal details in production
    """

    def __init__(self, app, debug: bool = False):
        """
        Initialize middleware.

        Args:
            app: FastAPI/Starlette application
            debug: Whether to include stack traces in responses
        """
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next):
        """Process request and handle any errors."""
        error_id = _new_error_id()

        try:
            response = await call_next(request)
            return response

        except HTTPException:
            # Let FastAPI handle HTTP exceptions
            raise

        except ServiceError as e:
            _log_service_error(e, error_id, request)
            return create_error_response(
                e.error_code,
                e.message,
                status_code=e.status_code,
                details=e.details,
                error_id=error_id,
            )

        except Exception as e:
            # Log full traceback for unexpected errors
            logger.error(
                f"[{error_id}] Unhandled error: {type(e).__name__}: {e}",
                extra={
                    "error_id": error_id,
                    "path": request.url.path,
                    "method": request.method,
                    "traceback": traceback.format_exc(),
                },
            )

            details = None
            if self.debug:
                details = {
                    "exception": type(e).__name__,
                    "message": str(e),
                    "traceback": traceback.format_exc(),
                }

            return create_error_response(
                "internal_server_error",
                "An unexpected error occurred",
                status_code=500,
                details=details,
                error_id=error_id,
            )


# =============================================================================
# Exception Handlers
# =============================================================================


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render a ServiceError raised by a route or dependency."""
    error_id = _new_error_id()
    _log_service_error(exc, error_id, request)
    return create_error_response(
        exc.error_code,
        exc.message,
        status_code=exc.status_code,
        details=exc.details,
        error_id=error_id,
    )


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Render malformed request bodies and query params as 400 validation_error."""
    error_id = _new_error_id()
    logger.info(
        f"[{error_id}] validation_error on {request.method} {request.url.path}"
    )
    return create_error_response(
        ReviewValidationError.error_code,
        "Request validation failed",
        status_code=ReviewValidationError.status_code,
        details={"errors": jsonable_encoder(exc.errors())},
        error_id=error_id,
    )


# =============================================================================
# Setup Function
# =============================================================================


def setup_error_handling(app: FastAPI, debug: bool = False) -> None:
    """
    Configure error handling on the FastAPI app.

    Args:
        app: FastAPI application instance
        debug: Whether to include stack traces in responses
    """
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_middleware(ErrorHandlingMiddleware, debug=debug)
    logger.info(f"Error handling middleware enabled (debug={debug})")


# =============================================================================
# Helper Functions
# =============================================================================


def _new_error_id() -> str:
    return str(uuid4())[:8]


def _log_service_error(exc: ServiceError, error_id: str, request: Request) -> None:
    # Client errors are expected traffic; only server-side failures are errors
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        f"[{error_id}] {exc.error_code}: {exc.message}",
        extra={
            "error_id": error_id,
            "error_code": exc.error_code,
            "path": request.url.path,
            "method": request.method,
            "details": exc.details,
        },
    )


def create_error_response(
    error_code: str,
    message: str,
    status_code: int = 500,
    details: dict = None,
    error_id: str = None,
) -> JSONResponse:
    """
    Create a standardized error response.

    Args:
        error_code: Error code for categorization
        message: Human-readable error message
        status_code: HTTP status code
        details: Optional additional details
        error_id: Correlation id already written to the log, if any

    Returns:
        JSONResponse with standardized error format
    """
    body = ErrorResponse(
        error=error_code,
        message=message,
        error_id=error_id or _new_error_id(),
        details=details,
        timestamp=datetime.now(timezone.utc),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))
