from typing import Dict, Optional

from fastapi import status


class AppError(Exception):
    """Base class for errors that map to a client-facing HTTP response."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Bad request"

    def __init__(self, detail: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        self.detail = detail or self.default_detail
        self.headers = headers
        super().__init__(self.detail)


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input"


class InvalidDateRange(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid date range"


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Could not validate credentials"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class ConflictingBudget(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "An overlapping budget already exists for this category and period"


class EmailAlreadyRegistered(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Email already registered"
