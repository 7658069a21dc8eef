# covergen/lib/errors.py
from __future__ import annotations

from typing import Any, Dict, Optional


class AppError(Exception):
    """Base error carrying an HTTP status and a stable machine code."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.details = details
        self.headers = headers or {}


class ValidationError(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, details: Any = None):
        super().__init__(message, details=details)
        self.field = field
        if field and details is None:
            self.details = {"field": field}


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Optional[str] = None):
        if resource_id is not None:
            message = f"{resource} with id {resource_id} not found"
        else:
            message = f"{resource} not found"
        super().__init__(message)


class UnauthorizedError(AppError):
    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(message)


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"


class RateLimitError(AppError):
    status_code = 429
    code = "RATE_LIMIT_EXCEEDED"

    def __init__(self, message: str = "Too many requests. Please try again later.", **kwargs):
        super().__init__(message, **kwargs)


class ExternalServiceError(AppError):
    status_code = 502
    code = "EXTERNAL_SERVICE_ERROR"


class AIProviderError(ExternalServiceError):
    code = "AI_PROVIDER_ERROR"


class StorageError(AppError):
    status_code = 500
    code = "STORAGE_ERROR"


class ContentFlaggedError(AppError):
    status_code = 400
    code = "CONTENT_FLAGGED"

    def __init__(self, message: str = "The submitted content contains inappropriate material that cannot be processed.", **kwargs):
        super().__init__(message, **kwargs)


_STATUS_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    429: "RATE_LIMIT_EXCEEDED",
    500: "INTERNAL_ERROR",
    502: "EXTERNAL_SERVICE_ERROR",
}


def code_for_status(status_code: int) -> str:
    return _STATUS_CODES.get(status_code, "INTERNAL_ERROR" if status_code >= 500 else "BAD_REQUEST")
