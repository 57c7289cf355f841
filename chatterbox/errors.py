"""
Error hierarchy for the login flow and the FastAPI handlers that render it.

Every error carries a stable machine-readable ``error_code`` and the HTTP
status the handler layer should answer with. Anything that is not an
AppError is reported as a generic 500.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

LOGGER = logging.getLogger(__name__)


class AppError(Exception):
    status_code: int = 500
    error_code: str = "internal_error"
    default_message: str = "An internal server error occurred."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Any] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.details = details
        self.headers = headers

    def to_dict(self) -> dict:
        payload: dict = {"error": self.message, "code": self.error_code}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class RateLimited(AppError):
    status_code = 429
    error_code = "rate_limited"
    default_message = "Please wait before requesting another code."

    def __init__(self, message: Optional[str] = None, *, retry_after: int = 60) -> None:
        super().__init__(
            message,
            details={"retryAfter": retry_after},
            headers={"Retry-After": str(retry_after)},
        )
        self.retry_after = retry_after


class AccountLocked(AppError):
    status_code = 423
    error_code = "account_locked"
    default_message = "Too many unused login codes. Try again later."


class InvalidOrExpiredCode(AppError):
    status_code = 401
    error_code = "invalid_or_expired_code"
    default_message = "The provided login code is invalid or has expired."


class AuthenticationRequired(AppError):
    status_code = 401
    error_code = "authentication_required"
    default_message = "Authorization header with Bearer token is required."


class TokenExpired(AppError):
    status_code = 401
    error_code = "token_expired"
    default_message = "Token expired. Please log in again."


class TokenInvalid(AppError):
    status_code = 401
    error_code = "token_invalid"
    default_message = "The provided token is malformed or invalid."


class TokenValidationFailed(AppError):
    status_code = 500
    error_code = "token_validation_failed"
    default_message = "An error occurred while validating the token."


class StorageError(AppError):
    """Opaque database failure. The operation name is kept for logs only."""

    status_code = 500
    error_code = "storage_error"
    default_message = "A storage error occurred. Please try again later."

    def __init__(self, operation: str) -> None:
        super().__init__()
        self.operation = operation


class InvalidLanguage(AppError):
    status_code = 400
    error_code = "invalid_language"
    default_message = "Language parameter is required."


class EmailNotConfigured(AppError):
    status_code = 503
    error_code = "email_not_configured"
    default_message = "Email service not configured."


class EmailSendError(AppError):
    status_code = 502
    error_code = "email_delivery_failed"
    default_message = "Failed to send login code."


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        if isinstance(exc, StorageError):
            LOGGER.error(
                "Storage failure during %s on %s %s",
                exc.operation,
                request.method,
                request.url.path,
                exc_info=exc.__cause__,
            )
        return JSONResponse(
            status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        LOGGER.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": AppError.default_message, "code": AppError.error_code},
        )
