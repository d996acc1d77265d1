# app/core/errors.py
"""
Application error taxonomy.

Services raise these exceptions; the handlers registered in app.main turn them
into JSON responses of the form {"success": false, "detail": CODE, "message": ...}.
"""
import asyncio
import logging
from typing import Awaitable, TypeVar

from app.config import settings

logger = logging.getLogger("uvicorn.error")

T = TypeVar("T")


class AppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None, code: str | None = None):
        if message is not None:
            self.message = message
        if code is not None:
            self.code = code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "detail": self.code, "message": self.message}


class Unauthorized(AppError):
    status_code = 401
    code = "AUTH_REQUIRED"
    message = "Authentication required"


class Forbidden(AppError):
    status_code = 403
    code = "FORBIDDEN"
    message = "You are not allowed to access this snippet"


class NotFound(AppError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Snippet not found"


class InvalidId(AppError):
    status_code = 400
    code = "INVALID_ID"
    message = "Invalid snippet ID"


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"
    message = "Invalid request"


class Conflict(AppError):
    status_code = 409
    code = "CONFLICT"
    message = "Resource already exists"


class RequestTimeout(AppError):
    status_code = 504
    code = "TIMEOUT"
    message = "The request took too long to complete"


class InternalError(AppError):
    pass


async def run_bounded(aw: Awaitable[T]) -> T:
    """
    Await a service call with the configured request timeout.

    Raises:
        RequestTimeout: If the call does not finish within settings.request_timeout_sec
    """
    try:
        return await asyncio.wait_for(aw, timeout=settings.request_timeout_sec)
    except asyncio.TimeoutError:
        logger.warning("[errors] request exceeded %.1fs timeout", settings.request_timeout_sec)
        raise RequestTimeout()
