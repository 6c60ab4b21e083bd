# app/core/errors.py - Typed failures raised by services and mapped to HTTP responses
from fastapi import status


class AppError(Exception):
    """Base class for errors that carry their own HTTP status"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(AppError):
    """Referenced student, payment or backup file does not exist"""

    status_code = status.HTTP_404_NOT_FOUND


class Forbidden(AppError):
    """Caller-supplied path escapes the directory it must stay in"""

    status_code = status.HTTP_403_FORBIDDEN


class StorageError(AppError):
    """Filesystem read, write or copy failure"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class ValidationError(AppError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


__all__ = ["AppError", "NotFound", "Forbidden", "StorageError", "ValidationError"]
