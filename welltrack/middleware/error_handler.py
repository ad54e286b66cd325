"""Exception handlers.

Every error leaves the API as ``{"error": <message>}``.
"""

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from welltrack.core.exceptions import AppException

logger = structlog.get_logger(__name__)

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."


def _error(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


def first_validation_message(exc: RequestValidationError) -> str:
    """
    Message of the first failing rule.

    Custom validators raise ``ValueError`` with a client-facing message, which
    pydantic prefixes with "Value error, "; that message is returned as is.
    Built-in rule failures are prefixed with the offending field name.
    """
    errors = exc.errors()
    if not errors:
        return "Validation error"

    first = errors[0]
    message = str(first.get("msg", "Validation error"))
    if first.get("type") == "value_error":
        return message.removeprefix("Value error, ")

    # Drop the request part ("body", "query", ...) from the location
    loc = [str(part) for part in first.get("loc", ())[1:]]
    if loc:
        return f"{'.'.join(loc)}: {message}"
    return message


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle custom application exceptions.

    Args:
        request: Request object
        exc: Application exception

    Returns:
        JSON error response
    """
    return _error(exc.status_code, exc.message)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions raised by the framework (404 route, 405, ...)."""
    return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """Handle request validation errors with the first failing rule only."""
    return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, first_validation_message(exc))


async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Handle requests rejected by the rate limiter."""
    logger.warning(
        "rate_limit_exceeded",
        path=request.url.path,
        limit=str(exc.detail),
    )
    return _error(status.HTTP_429_TOO_MANY_REQUESTS, RATE_LIMIT_MESSAGE)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected exceptions and hide their details from the client."""
    logger.error(
        "unhandled_exception",
        method=request.method,
        path=request.url.path,
        error=str(exc),
        exc_info=exc,
    )
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all handlers to the application."""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
