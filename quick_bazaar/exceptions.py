"""
Application exception hierarchy and HTTP error translation.

QuickBazaarError
├── DatabaseUnavailableError   → 500 (store unreachable)
│   └── DatabaseConfigurationError
├── StoreOperationError        → 500 (a route's store call failed)
└── NotFoundError              → 404

RequestValidationError: 400 for unparseable JSON, 500 for a body that is not a document.

Every response produced here is plain text. Details stay in the server log.
"""
import functools
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse

logger = logging.getLogger(__name__)

INTERNAL_ERROR_BODY = "Internal Server Error"
BAD_REQUEST_BODY = "Bad Request"

T = TypeVar("T")


class QuickBazaarError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message: Description safe to return to the client
        context: Additional debug info, logged but never returned
    """

    def __init__(self, message: str = "An unexpected error occurred", context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class DatabaseUnavailableError(QuickBazaarError):
    """Raised when no session to the document store could be established."""

    def __init__(self, message: str = "Database connection not available", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class DatabaseConfigurationError(DatabaseUnavailableError):
    """Raised when the connection string cannot be built from settings."""


class StoreOperationError(QuickBazaarError):
    """Raised when a single store operation behind a route fails."""


class NotFoundError(QuickBazaarError):
    """Raised when a lookup or delete matched no document."""

    def __init__(self, message: str = "Not found", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


def store_operation(log_message: str) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """
    Wrap an async route so any failure of its store call becomes a StoreOperationError.

    The route's own signature is preserved through functools.wraps so FastAPI
    still resolves its parameters and dependencies. Application errors and
    HTTPException pass through untouched.

    Args:
        log_message: Route-specific message written to the log on failure
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return await func(*args, **kwargs)
            except (QuickBazaarError, HTTPException):
                raise
            except Exception as e:
                logger.exception(f"{log_message}: {e}")
                raise StoreOperationError(log_message, context={"error": repr(e)}) from e

        return wrapper

    return decorator


def register_exception_handlers(app: FastAPI) -> None:
    """Map application exceptions to plain-text HTTP responses."""

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return PlainTextResponse(exc.message, status_code=404)

    @app.exception_handler(DatabaseUnavailableError)
    async def handle_database_unavailable(request: Request, exc: DatabaseUnavailableError):
        logger.error(f"Database unavailable for {request.method} {request.url.path}: {exc.message}")
        return PlainTextResponse(INTERNAL_ERROR_BODY, status_code=500)

    @app.exception_handler(StoreOperationError)
    async def handle_store_operation_error(request: Request, exc: StoreOperationError):
        return PlainTextResponse(INTERNAL_ERROR_BODY, status_code=500)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        logger.warning(f"Rejected request body on {request.method} {request.url.path}: {errors}")
        if any(error.get("type") == "json_invalid" for error in errors):
            return PlainTextResponse(BAD_REQUEST_BODY, status_code=400)
        # A body that parses but is not a document fails like the insert itself
        return PlainTextResponse(INTERNAL_ERROR_BODY, status_code=500)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        # Starlette re-raises after sending this response; the server logs the traceback
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc!r}")
        return PlainTextResponse(INTERNAL_ERROR_BODY, status_code=500)
