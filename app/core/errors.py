# app/core/errors.py
"""
Application error taxonomy.

Each error is an HTTPException with a fixed status code, so services can
raise them directly and FastAPI renders them as `{"detail": ...}`.
"""

from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str, headers: dict[str, str] | None = None):
        super().__init__(status_code=self.status_code, detail=detail, headers=headers)


class ValidationError(AppError):
    """Missing or malformed input field."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """A product with this SKU already exists."""

    status_code = status.HTTP_409_CONFLICT


class PayloadTooLargeError(AppError):
    status_code = status.HTTP_413_CONTENT_TOO_LARGE


class StorageError(AppError):
    """Unexpected object storage fault."""


class DatabaseError(AppError):
    """Unexpected database fault."""
