"""
Error handling and sanitization

- StorefrontError subclasses -> JSON body with their code and message
  (5xx messages pass through sanitize_error_message first)
- Unhandled exceptions -> generic message, full details logged only
"""
import logging
import uuid
from typing import Union

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from storefront.core.config import settings
from storefront.core.exceptions import StorefrontError

logger = logging.getLogger(__name__)

# Patterns that indicate internal/sensitive error information
SENSITIVE_PATTERNS = [
    "password",
    "secret",
    "token",
    "key",
    "credential",
    "card",
    "cvv",
    "sqlalchemy",
    "asyncpg",
    "psycopg",
    "postgresql",
    "traceback",
    "file \"",
    "line ",
]


def is_sensitive_error(message: str) -> bool:
    """Check if error message contains sensitive information."""
    message_lower = message.lower()
    return any(pattern in message_lower for pattern in SENSITIVE_PATTERNS)


def sanitize_error_message(error: Union[str, Exception]) -> str:
    """
    Sanitize an error message for safe client exposure.

    Args:
        error: The error string or exception

    Returns:
        Sanitized error message safe for client
    """
    message = error if isinstance(error, str) else str(error)

    if settings.DEBUG:
        return message

    if is_sensitive_error(message):
        return "An internal error occurred. Please try again later."

    if len(message) > 200:
        return message[:200] + "..."

    return message


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    """Answer a domain error with its status and message; server-side failures are sanitized."""
    message = exc.message
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r} details={exc.details}")
        message = sanitize_error_message(message)

    headers = None
    if exc.status_code == 401:
        headers = {"WWW-Authenticate": "Bearer", "Location": settings.LOGIN_PATH}

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.code.lower(),
            "message": message,
        },
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)


class ErrorSanitizationMiddleware(BaseHTTPMiddleware):
    """
    Last line for exceptions no handler claimed.

    The traceback is logged under an error id that is also returned, so a
    support request can be matched to the log line. Only DEBUG responses
    include the exception text.
    """

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except HTTPException:
            raise
        except Exception as e:
            error_id = uuid.uuid4().hex[:12]
            logger.error(
                f"Unhandled {type(e).__name__} [{error_id}] on {request.method} {request.url.path}",
                exc_info=True,
            )

            content = {
                "error": "internal_error",
                "message": "An unexpected error occurred. Please try again later.",
                "error_id": error_id,
            }
            if settings.DEBUG:
                content.update(message=str(e), type=type(e).__name__)
            return JSONResponse(status_code=500, content=content)
