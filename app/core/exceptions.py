"""Custom exceptions.

Every domain error carries a machine-readable ``code`` next to the HTTP
status; ``register_exception_handlers`` renders both to the client.
"""
from typing import Optional
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from app.localization.helpers import get_translation


class AppError(HTTPException):
    """Base class for user-facing domain errors."""

    code = "INTERNAL_SERVER_ERROR"
    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR
    translation_key = "errors.validation_error"

    def __init__(self, detail: Optional[str] = None, locale: Optional[str] = None):
        if detail is None:
            detail = get_translation(self.translation_key, locale)
        super().__init__(status_code=self.status_code_default, detail=detail)


class NotFoundError(AppError):
    """Resource not found exception."""

    code = "NOT_FOUND"
    status_code_default = status.HTTP_404_NOT_FOUND
    translation_key = "errors.resource_not_found"


class UnauthorizedError(AppError):
    """Unauthorized exception."""

    code = "UNAUTHORIZED"
    status_code_default = status.HTTP_401_UNAUTHORIZED
    translation_key = "errors.not_authenticated"


class ForbiddenError(AppError):
    """Forbidden exception."""

    code = "FORBIDDEN"
    status_code_default = status.HTTP_403_FORBIDDEN
    translation_key = "errors.permission_denied"


class ValidationError(AppError):
    """Validation exception."""

    code = "BAD_REQUEST"
    status_code_default = status.HTTP_422_UNPROCESSABLE_ENTITY
    translation_key = "errors.validation_error"


class ConflictError(AppError):
    """Conflict exception."""

    code = "CONFLICT"
    status_code_default = status.HTTP_409_CONFLICT
    translation_key = "errors.resource_conflict"


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Render a domain error as ``{"code": ..., "detail": ...}``."""
    headers = None
    if isinstance(exc, UnauthorizedError):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "detail": exc.detail},
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach domain error handlers to the application."""
    app.add_exception_handler(AppError, app_error_handler)
